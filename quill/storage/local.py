"""
Local storage implementations for development and tests.

In-memory implementations that work without any external services.
"""

from __future__ import annotations

import copy
from typing import Any

from quill.storage.base import MetadataStorage, StorageProvider


# =============================================================================
# In-Memory Metadata Storage
# =============================================================================


class InMemoryMetadataStorage(MetadataStorage):
    """In-memory document storage."""

    def __init__(self):
        self._data: dict[str, dict[int, dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}

    async def next_id(self, collection: str) -> int:
        # No await between read and write, so this is atomic on the event loop
        self._sequences[collection] = self._sequences.get(collection, 0) + 1
        return self._sequences[collection]

    async def save(self, collection: str, id: int, data: dict[str, Any]) -> None:
        if collection not in self._data:
            self._data[collection] = {}
        self._data[collection][id] = {**copy.deepcopy(data), "id": id}

    async def get(self, collection: str, id: int) -> dict[str, Any] | None:
        doc = self._data.get(collection, {}).get(id)
        return copy.deepcopy(doc) if doc is not None else None

    async def delete(self, collection: str, id: int) -> bool:
        if collection in self._data and id in self._data[collection]:
            del self._data[collection][id]
            return True
        return False

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        if collection not in self._data:
            return []

        results = list(self._data[collection].values())

        # Apply filters
        if filters:
            results = [
                doc for doc in results
                if all(doc.get(key) == value for key, value in filters.items())
            ]

        # Apply pagination
        end = offset + limit if limit is not None else None
        return [copy.deepcopy(doc) for doc in results[offset:end]]

    async def update(self, collection: str, id: int, updates: dict[str, Any]) -> bool:
        if collection in self._data and id in self._data[collection]:
            self._data[collection][id].update(copy.deepcopy(updates))
            return True
        return False


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> StorageProvider:
    """Create a StorageProvider with local implementations."""
    return StorageProvider(metadata=InMemoryMetadataStorage())
