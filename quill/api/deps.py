"""
Shared FastAPI dependencies for storage and services.
"""

from __future__ import annotations

from fastapi import Depends, Request

from quill.services import PostService, UserService
from quill.storage import StorageProvider


def get_storage(request: Request) -> StorageProvider:
    return request.app.state.storage


def get_post_service(storage: StorageProvider = Depends(get_storage)) -> PostService:
    return PostService(storage)


def get_user_service(
    storage: StorageProvider = Depends(get_storage),
    posts: PostService = Depends(get_post_service),
) -> UserService:
    return UserService(storage, posts)
