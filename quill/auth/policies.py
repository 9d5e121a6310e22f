"""
Route guards - the clean interface for route authorization.

Just use: `principal: Principal = Depends(require_auth())`

Design:
- Authentication always comes first: no principal means 401, and the
  role/ownership checks are never consulted.
- Coarse role guards (`require_role`, `require_any_role`,
  `require_permission`) run before any target is loaded: 403.
- Fine-grained decisions from post_policy/user_policy are turned into
  403s by `enforce()`, carrying the decision's reason verbatim.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quill.api.deps import get_user_service
from quill.auth.context import Principal
from quill.auth.decisions import Decision
from quill.auth.jwt import TokenError, check_token_version, decode_token
from quill.auth.roles import ResourceType, Role, can_perform, has_role
from quill.core.models import User
from quill.services import UserService

logger = logging.getLogger(__name__)


UNAUTHORIZED = "Unauthorized"
INSUFFICIENT_ROLE = "Forbidden: Insufficient role permissions"
INSUFFICIENT_PERMISSIONS = "Forbidden: Insufficient permissions"


# =============================================================================
# Errors
# =============================================================================


def unauthorized(detail: str = UNAUTHORIZED) -> HTTPException:
    """401: no principal could be resolved."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(detail: str) -> HTTPException:
    """403: a principal is present but not allowed."""
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def enforce(decision: Decision, principal: Principal, action: str) -> None:
    """Raise 403 with the decision's reason if it is a Deny."""
    if decision.allowed:
        return
    logger.info(
        f"Denied {action} for user {principal.id} ({principal.role.value}): {decision.reason}"
    )
    raise forbidden(decision.reason or INSUFFICIENT_PERMISSIONS)


# =============================================================================
# Token Handling
# =============================================================================


# Optional bearer (doesn't fail if no token)
optional_bearer = HTTPBearer(auto_error=False)


async def _resolve_user(
    credentials: HTTPAuthorizationCredentials | None,
    users: UserService,
) -> User | None:
    """
    Turn a bearer token into a stored user.

    Raises TokenError for bad, expired, or revoked tokens, and for
    tokens whose user no longer exists.
    """
    if not credentials:
        return None

    payload = decode_token(credentials.credentials, expected_type="access")
    user = await users.get(payload.sub)
    if user is None:
        raise TokenError("User no longer exists")
    check_token_version(payload, user.token_version)
    return user


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    users: UserService = Depends(get_user_service),
) -> User | None:
    """The caller's user, or None. Bad tokens count as anonymous."""
    try:
        return await _resolve_user(credentials, users)
    except TokenError as e:
        logger.info(f"Ignoring unusable token on public route: {e}")
        return None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    users: UserService = Depends(get_user_service),
) -> User:
    """The caller's user. 401 if there is none."""
    try:
        user = await _resolve_user(credentials, users)
    except TokenError as e:
        logger.info(f"Authentication failed: {e}")
        raise unauthorized()

    if user is None:
        raise unauthorized()
    return user


async def optional_principal(
    user: User | None = Depends(get_current_user_optional),
) -> Principal | None:
    return Principal.from_user(user) if user else None


async def current_principal(
    user: User = Depends(get_current_user),
) -> Principal:
    return Principal.from_user(user)


# =============================================================================
# Main Interface
# =============================================================================


def require_auth() -> Callable:
    """
    Just require authentication.

    Usage:
        @router.post("/posts")
        async def create_post(principal: Principal = Depends(require_auth())):
            ...
    """
    return current_principal


def require_role(role: Role | str, detail: str = INSUFFICIENT_ROLE) -> Callable:
    """Require an exact role (no hierarchy)."""

    async def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        if not has_role(principal, role):
            logger.info(f"Denied user {principal.id}: role {principal.role.value} is not {role}")
            raise forbidden(detail)
        return principal

    return dependency


def require_any_role(*roles: Role | str, detail: str = INSUFFICIENT_PERMISSIONS) -> Callable:
    """Require the principal's role to be in an explicit allow-set."""
    allowed = {Role(r) for r in roles}

    async def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        if principal.role not in allowed:
            logger.info(f"Denied user {principal.id}: role {principal.role.value} not allowed")
            raise forbidden(detail)
        return principal

    return dependency


def require_permission(action: str, resource: ResourceType | str | None = None) -> Callable:
    """Require the coarse can_perform() matrix to allow `action`."""

    async def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        if not can_perform(principal, action, resource):
            logger.info(
                f"Denied user {principal.id}: {principal.role.value} may not {action} {resource or 'post'}"
            )
            raise forbidden(INSUFFICIENT_PERMISSIONS)
        return principal

    return dependency
