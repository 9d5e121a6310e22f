"""
Principal - the "who" of every authorization decision.

This is the lightweight object passed to route handlers and policies.
It carries only what decisions need: an identity and a role. There is
no ambient "current user"; every policy receives the principal as an
explicit argument.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from quill.auth.roles import Role, is_admin, is_editor, is_viewer


@dataclass(frozen=True)
class Principal:
    """
    The authenticated actor making a request.

    Usage in routes:
        async def my_route(principal: Principal = Depends(require_auth())):
            if principal.is_admin:
                ...
    """

    id: int
    role: Role = Role.REGULAR

    # Display only, never used for identity comparisons
    name: str | None = None
    email: str | None = None

    def __post_init__(self):
        # Normalise stored/legacy values to the closed set
        object.__setattr__(self, "role", Role.from_value(self.role))

    @property
    def is_admin(self) -> bool:
        return is_admin(self)

    @property
    def is_editor(self) -> bool:
        return is_editor(self)

    @property
    def is_viewer(self) -> bool:
        return is_viewer(self)

    def is_same(self, other: Any) -> bool:
        """Identity equality. Name/email collisions are never "self"."""
        return self.id == getattr(other, "id", other)

    @classmethod
    def from_user(cls, user: Any) -> Principal:
        """Build a principal from a stored user record."""
        return cls(
            id=user.id,
            role=Role.from_value(user.role),
            name=user.name,
            email=user.email,
        )
