"""
Response models shared across routers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, TypeVar

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError, field_validator

from quill.core.models import Post, User


# Roles a request may assign (never `regular`)
AssignableRole = Literal["admin", "editor", "viewer"]


class UserResponse(BaseModel):
    """User data returned to client (no sensitive fields)."""
    id: int
    name: str
    email: str
    role: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(**user.public())


class OwnerSummary(BaseModel):
    id: int
    name: str


class PostResponse(BaseModel):
    id: int
    owner_id: int
    title: str
    body: str
    created_at: datetime
    updated_at: datetime
    user: OwnerSummary | None = None  # None when the owner no longer exists

    @classmethod
    def from_post(cls, post: Post, owner: User | None = None) -> PostResponse:
        return cls(
            **post.model_dump(),
            user=OwnerSummary(**owner.summary()) if owner else None,
        )


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# Partial Updates
# =============================================================================


class PartialUpdate(BaseModel):
    """
    Body of a PUT/PATCH. Omitted fields stay unchanged.

    A field that is present must carry a value; explicit nulls are rejected.
    """

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("Field may not be null")
        return value


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_body(model: type[ModelT], payload: dict[str, Any]) -> ModelT:
    """
    Validate a raw request body after authorization has run.

    Errors are reported exactly like FastAPI's own body validation (422).
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors(include_url=False)]
        )
