"""
Storage abstractions.

Integration Points:
- MetadataStorage → PostgreSQL (users, posts)
"""

from quill.storage.base import (
    MetadataStorage,
    StorageProvider,
    Collections,
)
from quill.storage.local import InMemoryMetadataStorage, create_local_storage

__all__ = [
    "MetadataStorage",
    "InMemoryMetadataStorage",
    "StorageProvider",
    "Collections",
    "create_local_storage",
]
