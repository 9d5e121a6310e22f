"""
Post policy - fine-grained decisions over a specific post.

Combines the principal's role with the post's owner. Every function is
pure: same inputs, same Decision, no caching.

Tie-break:
- admin wins everything
- editor may update any post but may only delete their own
- everyone else needs ownership for both update and delete

An owner id that no longer matches a live principal simply never
compares equal, so only admins/editors can act on such posts.
"""

from __future__ import annotations

from typing import Any

from quill.auth.decisions import Decision
from quill.auth.roles import is_admin, is_editor


UPDATE_OWN_ONLY = "You can only update your own posts"
EDITOR_DELETE_OWN_ONLY = "Editors can only delete their own posts"
DELETE_OWN_ONLY = "You can only delete your own posts"


def owns(principal: Any, post: Any) -> bool:
    """Does the principal own the post?"""
    return post.owner_id == principal.id


def view_any(principal: Any) -> Decision:
    """Every authenticated principal may list posts."""
    return Decision.allow()


def view(principal: Any, post: Any) -> Decision:
    """Every authenticated principal may view any post."""
    return Decision.allow()


def create(principal: Any) -> Decision:
    """
    Every authenticated principal may create posts.

    This is the gate wired to the create endpoint. It is more permissive
    than both can_perform("create") and can_create_posts() for `regular`.
    """
    return Decision.allow()


def update(principal: Any, post: Any) -> Decision:
    if is_admin(principal) or is_editor(principal):
        return Decision.allow()

    if owns(principal, post):
        return Decision.allow()
    return Decision.deny(UPDATE_OWN_ONLY)


def delete(principal: Any, post: Any) -> Decision:
    if is_admin(principal):
        return Decision.allow()

    if is_editor(principal):
        if owns(principal, post):
            return Decision.allow()
        return Decision.deny(EDITOR_DELETE_OWN_ONLY)

    if owns(principal, post):
        return Decision.allow()
    return Decision.deny(DELETE_OWN_ONLY)
