"""
Roles and coarse, resource-type-level permissions.

This defines WHAT a role may attempt before any target is known.
Instance-level refinement (ownership, self-protection) lives in
post_policy.py and user_policy.py.

Roles are a closed set and there is NO hierarchy: `admin` does not
satisfy a check for `editor`. Every predicate here is an exact match
against the principal's single role value.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class Role(str, Enum):
    """Platform-wide role of a principal."""

    ADMIN = "admin"          # Everything
    EDITOR = "editor"        # Manages posts, reads users
    VIEWER = "viewer"        # Reads users, manages own posts
    REGULAR = "regular"      # Self-service only

    @classmethod
    def from_value(cls, value: Any) -> Role:
        """
        Read a stored role value.

        Anything that is not one of the known roles (blank, missing,
        legacy values) is a `regular` principal.
        """
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.REGULAR


class ResourceType(str, Enum):
    """What kind of target a coarse check is about."""

    POST = "post"
    USER = "user"


# Roles a caller may request at registration, creation or promotion.
# `regular` is never assigned explicitly.
ASSIGNABLE_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.EDITOR, Role.VIEWER})

# Roles allowed to list/show users and read users-with-posts.
USER_DIRECTORY_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.EDITOR, Role.VIEWER})

# Roles allowed to author posts (see can_create_posts).
POST_AUTHOR_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.EDITOR, Role.VIEWER})

# Coarse action matrix: role -> resource type -> allowed actions.
# Admin is handled separately (everything), regular gets nothing.
ROLE_ACTIONS: dict[Role, dict[ResourceType, frozenset[str]]] = {
    Role.EDITOR: {
        ResourceType.POST: frozenset({"create", "read", "update", "delete"}),
        ResourceType.USER: frozenset({"read"}),
    },
    Role.VIEWER: {
        ResourceType.POST: frozenset({"read"}),
        ResourceType.USER: frozenset({"read"}),
    },
}


# =============================================================================
# Predicates
# =============================================================================


def _role_of(principal: Any) -> Role:
    return Role.from_value(getattr(principal, "role", None))


def has_role(principal: Any, role: Role | str) -> bool:
    """Exact match against the principal's role. No hierarchy."""
    try:
        wanted = Role(role)
    except ValueError:
        return False
    return _role_of(principal) == wanted


def is_admin(principal: Any) -> bool:
    return has_role(principal, Role.ADMIN)


def is_editor(principal: Any) -> bool:
    return has_role(principal, Role.EDITOR)


def is_viewer(principal: Any) -> bool:
    return has_role(principal, Role.VIEWER)


def can_perform(
    principal: Any,
    action: str,
    resource: ResourceType | str | None = None,
) -> bool:
    """
    Coarse check: may this role attempt `action` on this kind of resource?

    `resource` defaults to post-shaped actions; pass ResourceType.USER
    when the target is a principal. An unknown hint allows nothing
    (except for admins).

    Note: for viewers this is stricter than can_create_posts(), which is
    the gate actually used for post creation.
    """
    role = _role_of(principal)

    if role == Role.ADMIN:
        return True

    try:
        resource_type = ResourceType(resource) if resource else ResourceType.POST
    except ValueError:
        return False
    allowed = ROLE_ACTIONS.get(role, {}).get(resource_type, frozenset())
    return action in allowed


def can_create_posts(principal: Any) -> bool:
    """Independent post-authoring gate, not derived from can_perform()."""
    return _role_of(principal) in POST_AUTHOR_ROLES


def can_view_users(principal: Any) -> bool:
    """Explicit allow-set for the user directory endpoints."""
    return _role_of(principal) in USER_DIRECTORY_ROLES
