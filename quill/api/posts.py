# =============================================================================
# Post API Routes
# =============================================================================
#
# Endpoints:
#   GET    /posts              - List all posts (public)
#   POST   /posts              - Create post (auth, post_policy.create)
#   GET    /posts/{id}         - Show post (public, post_policy.view if authed)
#   PUT    /posts/{id}         - Update post (auth, post_policy.update)
#   PATCH  /posts/{id}         - Partial update (same as PUT)
#   DELETE /posts/{id}         - Delete post (auth, post_policy.delete)
#   GET    /my-posts           - Caller's own posts, newest first
#   GET    /users/{id}/posts   - Any user's posts, newest first
#
# Update bodies are validated only after post_policy.update allows.
#
# =============================================================================

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, Field

from quill.api.deps import get_post_service, get_user_service
from quill.api.schemas import MessageResponse, PartialUpdate, PostResponse, validate_body
from quill.auth import post_policy
from quill.auth.context import Principal
from quill.auth.policies import enforce, optional_principal, require_auth
from quill.core.models import Post
from quill.services import PostService, UserService

router = APIRouter(tags=["posts"])


# =============================================================================
# Request/Response Models
# =============================================================================


class CreatePostRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1, max_length=1000)


class UpdatePostRequest(PartialUpdate):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    body: str | None = Field(default=None, min_length=1, max_length=1000)


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    message: str


class SinglePostResponse(BaseModel):
    post: PostResponse
    message: str


# =============================================================================
# Helpers
# =============================================================================


async def _with_owners(posts: list[Post], users: UserService) -> list[PostResponse]:
    """Attach {id, name} of each owner. Dangling owners become None."""
    owners = {}
    for owner_id in {p.owner_id for p in posts}:
        owners[owner_id] = await users.get(owner_id)
    return [PostResponse.from_post(p, owners.get(p.owner_id)) for p in posts]


async def _load_post(post_id: int, posts: PostService) -> Post:
    post = await posts.get(post_id)
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


# =============================================================================
# Posts
# =============================================================================


@router.get("/posts", response_model=PostListResponse)
async def list_posts(
    principal: Principal | None = Depends(optional_principal),
    posts: PostService = Depends(get_post_service),
    users: UserService = Depends(get_user_service),
):
    """
    List all posts with their owners.

    Anonymous callers get the full collection without a policy check.
    """
    if principal:
        enforce(post_policy.view_any(principal), principal, "list posts")

    items = await posts.list_all()
    return PostListResponse(
        posts=await _with_owners(items, users),
        message="Posts retrieved successfully",
    )


@router.post("/posts", response_model=SinglePostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    request: CreatePostRequest,
    principal: Principal = Depends(require_auth()),
    posts: PostService = Depends(get_post_service),
    users: UserService = Depends(get_user_service),
):
    """Create a post owned by the caller."""
    enforce(post_policy.create(principal), principal, "create post")

    post = await posts.create(principal.id, request.title, request.body)
    owner = await users.get(principal.id)
    return SinglePostResponse(
        post=PostResponse.from_post(post, owner),
        message="Post created successfully",
    )


@router.get("/posts/{post_id}", response_model=SinglePostResponse)
async def show_post(
    post_id: int,
    principal: Principal | None = Depends(optional_principal),
    posts: PostService = Depends(get_post_service),
    users: UserService = Depends(get_user_service),
):
    """Show a single post. The view policy runs only for authenticated callers."""
    post = await _load_post(post_id, posts)

    if principal:
        enforce(post_policy.view(principal, post), principal, f"view post {post.id}")

    owner = await users.get(post.owner_id)
    return SinglePostResponse(
        post=PostResponse.from_post(post, owner),
        message="Post retrieved successfully",
    )


@router.api_route(
    "/posts/{post_id}",
    methods=["PUT", "PATCH"],
    response_model=SinglePostResponse,
)
async def update_post(
    post_id: int,
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(require_auth()),
    posts: PostService = Depends(get_post_service),
    users: UserService = Depends(get_user_service),
):
    """
    Update a post (owner, editor, or admin).

    The body is validated only once the caller may update this post.
    """
    post = await _load_post(post_id, posts)
    enforce(post_policy.update(principal, post), principal, f"update post {post.id}")
    request = validate_body(UpdatePostRequest, payload)

    post = await posts.update(post, title=request.title, body=request.body)
    owner = await users.get(post.owner_id)
    return SinglePostResponse(
        post=PostResponse.from_post(post, owner),
        message="Post updated successfully",
    )


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int,
    principal: Principal = Depends(require_auth()),
    posts: PostService = Depends(get_post_service),
):
    """Permanently delete a post (owner or admin; editors only their own)."""
    post = await _load_post(post_id, posts)
    enforce(post_policy.delete(principal, post), principal, f"delete post {post.id}")

    await posts.delete(post)
    return MessageResponse(message=f"Post '{post.title}' has been deleted successfully")


# =============================================================================
# Per-user listings
# =============================================================================


@router.get("/my-posts", response_model=PostListResponse)
async def my_posts(
    principal: Principal = Depends(require_auth()),
    posts: PostService = Depends(get_post_service),
):
    """The caller's own posts, newest first."""
    items = await posts.list_by_owner(principal.id)
    return PostListResponse(
        posts=[PostResponse.from_post(p) for p in items],
        message="Your posts retrieved successfully",
    )


@router.get("/users/{user_id}/posts", response_model=PostListResponse)
async def user_posts(
    user_id: int,
    principal: Principal = Depends(require_auth()),
    posts: PostService = Depends(get_post_service),
    users: UserService = Depends(get_user_service),
):
    """Any user's posts, newest first. Unknown ids give an empty list."""
    items = await posts.list_by_owner(user_id)
    return PostListResponse(
        posts=await _with_owners(items, users),
        message="User's posts retrieved successfully",
    )
