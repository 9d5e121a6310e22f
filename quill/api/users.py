# =============================================================================
# User API Routes
# =============================================================================
#
# Endpoints:
#   GET    /users                 - List users       (admin, editor, viewer)
#   GET    /users-with-posts      - Users + 5 newest (admin, editor, viewer)
#   GET    /users/{id}            - Show user        (admin, editor, viewer)
#   POST   /users                 - Create user      (admin)
#   PUT    /users/{id}            - Update user      (self or admin)
#   PATCH  /users/{id}            - Partial update   (same as PUT)
#   DELETE /users/{id}            - Delete user      (admin, not self)
#   POST   /users/{id}/promote    - Change role      (admin, not self)
#
# Coarse role checks are dependencies, so they run right after
# authentication and before the body is validated or the target loaded.
# Update bodies are validated only after the fine-grained decision.
#
# =============================================================================

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field

from quill.api.deps import get_user_service
from quill.api.schemas import (
    AssignableRole,
    MessageResponse,
    PartialUpdate,
    PostResponse,
    UserResponse,
    validate_body,
)
from quill.auth import user_policy
from quill.auth.context import Principal
from quill.auth.policies import current_principal, enforce, require_any_role, require_role
from quill.auth.roles import USER_DIRECTORY_ROLES, Role, is_admin
from quill.core.models import User
from quill.services import EmailTakenError, UserService

router = APIRouter(tags=["users"])

VIEW_USERS_DENIED = "Forbidden: Insufficient permissions to view users"
VIEW_USER_DETAILS_DENIED = "Forbidden: Insufficient permissions to view user details"

# Coarse guards
directory_access = require_any_role(*USER_DIRECTORY_ROLES, detail=VIEW_USERS_DENIED)
user_details_access = require_any_role(*USER_DIRECTORY_ROLES, detail=VIEW_USER_DETAILS_DENIED)
users_with_posts_access = require_any_role(*USER_DIRECTORY_ROLES)


# =============================================================================
# Request/Response Models
# =============================================================================


class CreateUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8)
    role: AssignableRole


class UpdateUserRequest(PartialUpdate):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)
    role: AssignableRole | None = None


class PromoteRequest(BaseModel):
    role: AssignableRole


class UserListResponse(BaseModel):
    users: list[UserResponse]
    message: str


class SingleUserResponse(BaseModel):
    user: UserResponse
    message: str


class UserWithPosts(UserResponse):
    posts: list[PostResponse]


class UsersWithPostsResponse(BaseModel):
    users: list[UserWithPosts]
    message: str


# =============================================================================
# Helpers
# =============================================================================


async def _load_user(user_id: int, users: UserService) -> User:
    user = await users.get(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def _email_taken(e: EmailTakenError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


# =============================================================================
# Directory (read)
# =============================================================================


@router.get("/users", response_model=UserListResponse)
async def list_users(
    principal: Principal = Depends(directory_access),
    users: UserService = Depends(get_user_service),
):
    items = await users.list_all()
    return UserListResponse(
        users=[UserResponse.from_user(u) for u in items],
        message="Users retrieved successfully",
    )


@router.get("/users-with-posts", response_model=UsersWithPostsResponse)
async def users_with_posts(
    principal: Principal = Depends(users_with_posts_access),
    users: UserService = Depends(get_user_service),
):
    """Every user with their 5 newest posts."""
    rows = await users.list_with_posts(posts_per_user=5)
    return UsersWithPostsResponse(
        users=[
            UserWithPosts(
                **user.public(),
                posts=[PostResponse.from_post(p) for p in posts],
            )
            for user, posts in rows
        ],
        message="Users with posts retrieved successfully",
    )


@router.get("/users/{user_id}", response_model=SingleUserResponse)
async def show_user(
    user_id: int,
    principal: Principal = Depends(user_details_access),
    users: UserService = Depends(get_user_service),
):
    user = await _load_user(user_id, users)
    return SingleUserResponse(
        user=UserResponse.from_user(user),
        message="User retrieved successfully",
    )


# =============================================================================
# Administration (write)
# =============================================================================


@router.post("/users", response_model=SingleUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    principal: Principal = Depends(
        require_role(Role.ADMIN, detail=user_policy.ADMIN_ONLY_CREATE)
    ),
    users: UserService = Depends(get_user_service),
):
    """Create a user with any assignable role (admin only)."""
    enforce(user_policy.create(principal), principal, "create user")

    try:
        user = await users.create(
            name=request.name,
            email=request.email,
            password=request.password,
            role=request.role,
        )
    except EmailTakenError as e:
        raise _email_taken(e)

    return SingleUserResponse(
        user=UserResponse.from_user(user),
        message="User created successfully",
    )


@router.api_route(
    "/users/{user_id}",
    methods=["PUT", "PATCH"],
    response_model=SingleUserResponse,
)
async def update_user(
    user_id: int,
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(current_principal),
    users: UserService = Depends(get_user_service),
):
    """
    Update a profile.

    Admins may update anyone, including roles. Everyone else may update
    only themselves and never their own role. The body is validated
    only after that decision, so a denied caller never sees a 422.
    """
    target = await _load_user(user_id, users)
    changes_role = "role" in payload

    enforce(
        user_policy.update(principal, target, changes_role=changes_role),
        principal,
        f"update user {target.id}",
    )
    request = validate_body(UpdateUserRequest, payload)

    # Only admins reach here with a role for someone else
    new_role = Role(request.role) if request.role and is_admin(principal) else None

    try:
        user = await users.update(
            target,
            name=request.name,
            email=request.email,
            password=request.password,
            role=new_role,
        )
    except EmailTakenError as e:
        raise _email_taken(e)

    return SingleUserResponse(
        user=UserResponse.from_user(user),
        message="User updated successfully",
    )


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    principal: Principal = Depends(
        require_role(Role.ADMIN, detail=user_policy.ADMIN_ONLY_DELETE)
    ),
    users: UserService = Depends(get_user_service),
):
    """Delete a user and their posts (admin only, never yourself)."""
    target = await _load_user(user_id, users)
    enforce(user_policy.delete(principal, target), principal, f"delete user {target.id}")

    await users.delete(target)
    return MessageResponse(message="User deleted successfully")


@router.post("/users/{user_id}/promote", response_model=SingleUserResponse)
async def promote_user(
    user_id: int,
    request: PromoteRequest,
    principal: Principal = Depends(
        require_role(Role.ADMIN, detail=user_policy.ADMIN_ONLY_PROMOTE)
    ),
    users: UserService = Depends(get_user_service),
):
    """Change another user's role (admin only, never your own)."""
    target = await _load_user(user_id, users)
    enforce(user_policy.promote(principal, target), principal, f"promote user {target.id}")

    old_role = target.resolved_role
    user = await users.change_role(target, Role(request.role))
    return SingleUserResponse(
        user=UserResponse.from_user(user),
        message=f"User role changed from {old_role.value} to {user.role}",
    )
