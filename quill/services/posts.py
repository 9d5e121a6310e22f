"""
Post persistence.

CRUD only. Whether a principal may do any of this is decided in
quill.auth.post_policy before these are called.
"""

from __future__ import annotations

import logging

from quill.core.models import Post
from quill.core.utils import utc_now
from quill.storage import Collections, StorageProvider

logger = logging.getLogger(__name__)


def newest_first(posts: list[Post]) -> list[Post]:
    return sorted(posts, key=lambda p: (p.created_at, p.id), reverse=True)


class PostService:
    """Stores and loads posts."""

    def __init__(self, storage: StorageProvider):
        self.storage = storage

    async def create(self, owner_id: int, title: str, body: str) -> Post:
        post_id = await self.storage.metadata.next_id(Collections.POSTS)
        post = Post(id=post_id, owner_id=owner_id, title=title, body=body)
        await self.storage.metadata.save(Collections.POSTS, post.id, post.model_dump())
        logger.info(f"Post {post.id} created by user {owner_id}")
        return post

    async def get(self, post_id: int) -> Post | None:
        data = await self.storage.metadata.get(Collections.POSTS, post_id)
        return Post(**data) if data else None

    async def list_all(self) -> list[Post]:
        docs = await self.storage.metadata.query(Collections.POSTS)
        return [Post(**doc) for doc in docs]

    async def list_by_owner(self, owner_id: int, limit: int | None = None) -> list[Post]:
        """An owner's posts, newest first."""
        docs = await self.storage.metadata.query(Collections.POSTS, {"owner_id": owner_id})
        posts = newest_first([Post(**doc) for doc in docs])
        return posts[:limit] if limit is not None else posts

    async def update(
        self,
        post: Post,
        title: str | None = None,
        body: str | None = None,
    ) -> Post:
        """Partial update. owner_id is never touched."""
        updates: dict = {}
        if title is not None:
            updates["title"] = title
        if body is not None:
            updates["body"] = body
        updates["updated_at"] = utc_now()

        await self.storage.metadata.update(Collections.POSTS, post.id, updates)
        return post.model_copy(update=updates)

    async def delete(self, post: Post) -> bool:
        deleted = await self.storage.metadata.delete(Collections.POSTS, post.id)
        if deleted:
            logger.info(f"Post {post.id} deleted")
        return deleted

    async def delete_by_owner(self, owner_id: int) -> int:
        """Remove every post owned by a user. Returns how many were removed."""
        docs = await self.storage.metadata.query(Collections.POSTS, {"owner_id": owner_id})
        for doc in docs:
            await self.storage.metadata.delete(Collections.POSTS, doc["id"])
        return len(docs)
