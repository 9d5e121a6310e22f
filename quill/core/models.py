"""
Core data records.

Plain data: no authorization behavior lives here. Decisions are made
by the functions in quill.auth over these records.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from quill.auth.roles import Role
from quill.core.utils import utc_now


# =============================================================================
# User
# =============================================================================


class User(BaseModel):
    """A stored user account (the persisted form of a principal)."""

    id: int
    name: str
    email: str
    password_hash: str
    role: str = Role.VIEWER.value

    # Bumped on logout; tokens carrying an older version are rejected
    token_version: int = 0

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def resolved_role(self) -> Role:
        return Role.from_value(self.role)

    def public(self) -> dict:
        """User data safe to return to clients."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.resolved_role.value,
            "created_at": self.created_at,
        }

    def summary(self) -> dict:
        """Minimal owner info embedded in posts."""
        return {"id": self.id, "name": self.name}


# =============================================================================
# Post
# =============================================================================


class Post(BaseModel):
    """An owned content item. Ownership never transfers."""

    id: int
    owner_id: int
    title: str
    body: str

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
