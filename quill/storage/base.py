"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory → PostgreSQL, etc.) without changing
application code.

The authorization core never touches storage. It assumes that the
owner id observed when a decision is made is still the committed value
when the write happens; implementations backed by a real database must
provide that (transaction or version check).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


# =============================================================================
# Storage Interfaces
# =============================================================================


class MetadataStorage(ABC):
    """
    Storage for structured records (users, posts).

    Production Implementation: PostgreSQL
    Local Implementation: in-memory
    """

    @abstractmethod
    async def next_id(self, collection: str) -> int:
        """Allocate the next integer id for a collection."""
        pass

    @abstractmethod
    async def save(self, collection: str, id: int, data: dict[str, Any]) -> None:
        """Save a document to a collection."""
        pass

    @abstractmethod
    async def get(self, collection: str, id: int) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def delete(self, collection: str, id: int) -> bool:
        """Delete a document."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query documents with optional equality filters, in insertion order."""
        pass

    @abstractmethod
    async def update(self, collection: str, id: int, updates: dict[str, Any]) -> bool:
        """Partial update of a document."""
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.

    Initialize once at app startup with appropriate implementations.
    Services receive this and use the interfaces without knowing
    the underlying implementation.
    """

    model_config = {"arbitrary_types_allowed": True}

    metadata: MetadataStorage


# =============================================================================
# Collection Names (for MetadataStorage)
# =============================================================================


class Collections:
    """Standard collection/table names."""

    USERS = "users"
    POSTS = "posts"
