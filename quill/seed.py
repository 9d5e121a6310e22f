"""
Demo data for local development.

Enabled with SEED_DEMO_DATA=true. Seeds one account per assignable role
and a few posts owned by the admin.
"""

from __future__ import annotations

import logging

from quill.auth.roles import Role
from quill.services import PostService, UserService
from quill.storage import StorageProvider

logger = logging.getLogger(__name__)


DEMO_USERS = [
    ("Super Admin", "admin@quill.dev", "admin123", Role.ADMIN),
    ("Editor", "editor@quill.dev", "editor123", Role.EDITOR),
    ("Viewer", "viewer@quill.dev", "viewer123", Role.VIEWER),
]

DEMO_POSTS = [
    ("Welcome to Quill", "Posts belong to whoever wrote them. Editors may revise any post."),
    ("Roles at a glance", "Admins manage everything, editors curate content, viewers read."),
    ("Housekeeping", "Only admins can create, delete, or promote other accounts."),
]


async def seed_demo_data(storage: StorageProvider) -> None:
    """Create the demo accounts and posts. Skips if the admin already exists."""
    posts = PostService(storage)
    users = UserService(storage, posts)

    if await users.get_by_email(DEMO_USERS[0][1]):
        logger.info("Demo data already present, skipping seed")
        return

    created = {}
    for name, email, password, role in DEMO_USERS:
        created[role] = await users.create(name=name, email=email, password=password, role=role)

    admin = created[Role.ADMIN]
    for title, body in DEMO_POSTS:
        await posts.create(admin.id, title, body)

    logger.info(f"Seeded {len(DEMO_USERS)} demo users and {len(DEMO_POSTS)} posts")
