"""
Persistence services for users and posts.
"""

from quill.services.posts import PostService
from quill.services.users import EmailTakenError, UserService

__all__ = [
    "EmailTakenError",
    "PostService",
    "UserService",
]
