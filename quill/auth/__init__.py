"""
Authorization system.

Two layers, both pure functions of (principal, resource):
1. Roles - exact-match role checks and the coarse action matrix
2. Ownership - per-resource decisions for posts and users

Route guards that turn these decisions into HTTP errors live in
quill.auth.policies.
"""

from quill.auth import post_policy, user_policy
from quill.auth.context import Principal
from quill.auth.decisions import Decision
from quill.auth.roles import (
    ROLE_ACTIONS,
    ResourceType,
    Role,
    can_create_posts,
    can_perform,
    can_view_users,
    has_role,
    is_admin,
    is_editor,
    is_viewer,
)

__all__ = [
    # Types
    "Principal",
    "Decision",
    "Role",
    "ResourceType",
    "ROLE_ACTIONS",
    # Role checks
    "has_role",
    "is_admin",
    "is_editor",
    "is_viewer",
    "can_perform",
    "can_create_posts",
    "can_view_users",
    # Ownership
    "post_policy",
    "user_policy",
]
