"""
User policy - administrative and self-protection rules.

Same shape as post_policy, but the comparison target is *self*:
the acting principal's id against the target user's id. Nothing else
(name, email) ever makes a target "self".
"""

from __future__ import annotations

from typing import Any

from quill.auth.decisions import Decision
from quill.auth.roles import is_admin


ADMIN_ONLY_CREATE = "Forbidden: Only admins can create users"
ADMIN_ONLY_DELETE = "Forbidden: Only admins can delete users"
ADMIN_ONLY_PROMOTE = "Forbidden: Only admins can promote users"
UPDATE_OWN_PROFILE_ONLY = "You can only update your own profile"
NO_SELF_ROLE_CHANGE = "You cannot change your own role"
NO_SELF_DELETE = "You cannot delete your own account"


def is_self(principal: Any, target: Any) -> bool:
    return principal.id == target.id


def create(principal: Any) -> Decision:
    """Only admins create users, with any role including admin."""
    if not is_admin(principal):
        return Decision.deny(ADMIN_ONLY_CREATE)
    return Decision.allow()


def update(principal: Any, target: Any, changes_role: bool = False) -> Decision:
    """
    Admins may update anyone. Everyone else may update only themselves.

    Including a role in a self-update is a hard deny, for admins too;
    role changes on oneself are never silently dropped.
    """
    if not is_admin(principal) and not is_self(principal, target):
        return Decision.deny(UPDATE_OWN_PROFILE_ONLY)

    if changes_role and is_self(principal, target):
        return Decision.deny(NO_SELF_ROLE_CHANGE)

    return Decision.allow()


def delete(principal: Any, target: Any) -> Decision:
    if not is_admin(principal):
        return Decision.deny(ADMIN_ONLY_DELETE)

    if is_self(principal, target):
        return Decision.deny(NO_SELF_DELETE)

    return Decision.allow()


def promote(principal: Any, target: Any) -> Decision:
    """
    Change another user's role.

    The requested role is validated before this is called; an invalid
    role never reaches the policy.
    """
    if not is_admin(principal):
        return Decision.deny(ADMIN_ONLY_PROMOTE)

    if is_self(principal, target):
        return Decision.deny(NO_SELF_ROLE_CHANGE)

    return Decision.allow()
