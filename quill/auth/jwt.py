# =============================================================================
# JWT Authentication Implementation
# =============================================================================
#
# This module provides:
#   - Token creation (access + refresh)
#   - Token validation
#   - Password hashing
#
# Tokens carry the user's token_version ("ver"). Logging out bumps the
# stored version, which invalidates every token issued before it.
#
# =============================================================================

from datetime import datetime, timedelta, timezone
import hashlib
import logging
import secrets
import uuid

from pydantic import BaseModel
import jwt

from quill.config import get_settings
from quill.core.utils import utc_now

logger = logging.getLogger(__name__)
settings = get_settings()


# =============================================================================
# Models
# =============================================================================

class TokenPayload(BaseModel):
    """JWT token payload."""
    sub: int  # user_id
    exp: datetime
    iat: datetime
    type: str  # "access" or "refresh"
    ver: int  # user's token_version when issued
    jti: str


class TokenPair(BaseModel):
    """Access and refresh token pair."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expires


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: iterations:salt:hash format string
    """
    iterations = settings.password_hash_iterations
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=iterations,
    )
    return f"{iterations}:{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        iterations, salt, stored_hash = password_hash.split(':')
        hash_bytes = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            iterations=int(iterations),
        )
        return secrets.compare_digest(hash_bytes.hex(), stored_hash)
    except (ValueError, AttributeError):
        return False


# =============================================================================
# Token Creation
# =============================================================================

def _encode(user_id: int, token_version: int, token_type: str, lifetime: timedelta) -> str:
    now = utc_now()
    payload = {
        "sub": str(user_id),
        "exp": now + lifetime,
        "iat": now,
        "type": token_type,
        "ver": token_version,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, token_version: int = 0) -> str:
    """Create a JWT access token."""
    lifetime = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(user_id, token_version, "access", lifetime)


def create_refresh_token(user_id: int, token_version: int = 0) -> str:
    """Create a JWT refresh token (longer-lived)."""
    lifetime = timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(user_id, token_version, "refresh", lifetime)


def create_token_pair(user_id: int, token_version: int = 0) -> TokenPair:
    """Create both access and refresh tokens."""
    return TokenPair(
        access_token=create_access_token(user_id, token_version),
        refresh_token=create_refresh_token(user_id, token_version),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


# =============================================================================
# Token Validation
# =============================================================================

class TokenError(Exception):
    """Base exception for token errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid, malformed, or revoked."""
    pass


def decode_token(token: str, expected_type: str = "access") -> TokenPayload:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT string
        expected_type: "access" or "refresh"

    Returns:
        TokenPayload with validated claims

    Raises:
        TokenExpiredError: Token has expired
        TokenInvalidError: Token is invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        # Validate token type
        if payload.get("type") != expected_type:
            raise TokenInvalidError(f"Expected {expected_type} token, got {payload.get('type')}")

        return TokenPayload(
            sub=int(payload["sub"]),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            type=payload["type"],
            ver=int(payload.get("ver", 0)),
            jti=payload.get("jti", ""),
        )

    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError(f"Invalid token: {e}")
    except (KeyError, TypeError, ValueError) as e:
        raise TokenInvalidError(f"Invalid token payload: {e}")


def check_token_version(payload: TokenPayload, current_version: int) -> None:
    """Reject tokens issued before the user's last logout."""
    if payload.ver != current_version:
        raise TokenInvalidError("Token has been revoked")
