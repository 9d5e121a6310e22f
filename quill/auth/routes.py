# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /register  - Create account (public)
#   POST /login     - Get tokens
#   POST /refresh   - Refresh tokens
#   POST /logout    - Invalidate all of the caller's tokens
#   GET  /profile   - Get current user
#
# =============================================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field, model_validator

from quill.api.deps import get_user_service
from quill.api.schemas import AssignableRole, MessageResponse, UserResponse
from quill.auth.jwt import (
    TokenExpiredError,
    TokenInvalidError,
    TokenPair,
    check_token_version,
    create_token_pair,
    decode_token,
)
from quill.auth.policies import get_current_user
from quill.core.models import User
from quill.services import EmailTakenError, UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# =============================================================================
# Request/Response Models
# =============================================================================

class RegisterRequest(BaseModel):
    """
    User registration data.

    `role` is optional and defaults to viewer. Any assignable role,
    including admin, is accepted here.
    """
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8)
    password_confirmation: str
    role: AssignableRole | None = None

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError("The password field confirmation does not match.")
        return self


class RegisterResponse(BaseModel):
    user: UserResponse
    message: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(TokenPair):
    user: UserResponse
    message: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ProfileResponse(BaseModel):
    user: UserResponse
    message: str


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/register", response_model=RegisterResponse)
async def register(
    data: RegisterRequest,
    users: UserService = Depends(get_user_service),
):
    """Create a new account."""
    try:
        user = await users.create(
            name=data.name,
            email=data.email,
            password=data.password,
            role=data.role or "viewer",
        )
    except EmailTakenError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if data.role == "admin":
        logger.warning(f"User {user.id} self-registered as admin")

    return RegisterResponse(
        user=UserResponse.from_user(user),
        message="User has been created !",
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    users: UserService = Depends(get_user_service),
):
    """Authenticate and get tokens."""
    user = await users.authenticate(data.email, data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please enter valid credentials",
        )

    tokens = create_token_pair(user.id, user.token_version)
    return LoginResponse(
        **tokens.model_dump(),
        user=UserResponse.from_user(user),
        message="You are logged in !",
    )


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    data: RefreshRequest,
    users: UserService = Depends(get_user_service),
):
    """Use refresh token to get new tokens."""
    try:
        payload = decode_token(data.refresh_token, expected_type="refresh")
        user = await users.get(payload.sub)
        if user is None:
            raise TokenInvalidError("User no longer exists")
        check_token_version(payload, user.token_version)
    except TokenExpiredError:
        raise HTTPException(status_code=401, detail="Refresh token expired, please login again")
    except TokenInvalidError as e:
        raise HTTPException(status_code=401, detail=str(e))

    return create_token_pair(user.id, user.token_version)


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.post("/logout", response_model=MessageResponse)
async def logout(
    user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Logout everywhere: every token issued so far stops working."""
    await users.revoke_tokens(user)
    return MessageResponse(message="You Are Logged Out")


@router.get("/profile", response_model=ProfileResponse)
async def profile(user: User = Depends(get_current_user)):
    """Get the current authenticated user."""
    return ProfileResponse(
        user=UserResponse.from_user(user),
        message="Profile retrieved successfully",
    )
