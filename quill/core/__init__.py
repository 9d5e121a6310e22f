"""
Core data records.
"""

from quill.core.models import Post, User
from quill.core.utils import utc_now

__all__ = [
    "Post",
    "User",
    "utc_now",
]
