"""
User persistence.

CRUD, credential checks, and token revocation bookkeeping. Whether a
principal may do any of this is decided in quill.auth.user_policy.
"""

from __future__ import annotations

import logging

from quill.auth.jwt import hash_password, verify_password
from quill.auth.roles import Role
from quill.core.models import Post, User
from quill.core.utils import utc_now
from quill.services.posts import PostService
from quill.storage import Collections, StorageProvider

logger = logging.getLogger(__name__)


class EmailTakenError(ValueError):
    """Another account already uses this email."""

    def __init__(self, email: str):
        super().__init__(f"The email {email} has already been taken.")
        self.email = email


class UserService:
    """Stores and loads user accounts."""

    def __init__(self, storage: StorageProvider, posts: PostService | None = None):
        self.storage = storage
        self.posts = posts or PostService(storage)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, user_id: int) -> User | None:
        data = await self.storage.metadata.get(Collections.USERS, user_id)
        return User(**data) if data else None

    async def get_by_email(self, email: str) -> User | None:
        docs = await self.storage.metadata.query(
            Collections.USERS, {"email": email.lower()}, limit=1
        )
        return User(**docs[0]) if docs else None

    async def list_all(self) -> list[User]:
        docs = await self.storage.metadata.query(Collections.USERS)
        return [User(**doc) for doc in docs]

    async def list_with_posts(self, posts_per_user: int = 5) -> list[tuple[User, list[Post]]]:
        """Every user with their newest posts."""
        users = await self.list_all()
        return [
            (user, await self.posts.list_by_owner(user.id, limit=posts_per_user))
            for user in users
        ]

    async def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate user by email and password."""
        user = await self.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(
        self,
        name: str,
        email: str,
        password: str,
        role: Role | str = Role.VIEWER,
    ) -> User:
        """Create a new user. Raises EmailTakenError on duplicates."""
        if await self.get_by_email(email):
            raise EmailTakenError(email)

        user_id = await self.storage.metadata.next_id(Collections.USERS)
        user = User(
            id=user_id,
            name=name,
            email=email.lower(),
            password_hash=hash_password(password),
            role=Role.from_value(role).value,
        )
        await self.storage.metadata.save(Collections.USERS, user.id, user.model_dump())
        logger.info(f"User {user.id} created with role {user.role}")
        return user

    async def update(
        self,
        user: User,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        role: Role | None = None,
    ) -> User:
        """Partial update. Only provided fields change."""
        updates: dict = {}

        if name is not None:
            updates["name"] = name

        if email is not None and email.lower() != user.email:
            existing = await self.get_by_email(email)
            if existing and existing.id != user.id:
                raise EmailTakenError(email)
            updates["email"] = email.lower()

        if password is not None:
            updates["password_hash"] = hash_password(password)

        if role is not None:
            updates["role"] = Role(role).value

        updates["updated_at"] = utc_now()
        await self.storage.metadata.update(Collections.USERS, user.id, updates)
        return user.model_copy(update=updates)

    async def change_role(self, user: User, role: Role) -> User:
        old_role = user.resolved_role
        updated = await self.update(user, role=role)
        logger.info(f"User {user.id} role changed from {old_role.value} to {updated.role}")
        return updated

    async def revoke_tokens(self, user: User) -> User:
        """Invalidate every token issued to this user so far."""
        updates = {"token_version": user.token_version + 1, "updated_at": utc_now()}
        await self.storage.metadata.update(Collections.USERS, user.id, updates)
        return user.model_copy(update=updates)

    async def delete(self, user: User) -> bool:
        """Delete a user and cascade-delete their posts."""
        removed_posts = await self.posts.delete_by_owner(user.id)
        deleted = await self.storage.metadata.delete(Collections.USERS, user.id)
        if deleted:
            logger.info(f"User {user.id} deleted along with {removed_posts} posts")
        return deleted
