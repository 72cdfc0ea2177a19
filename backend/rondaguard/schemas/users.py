"""
RondaGuard Backend - User Schemas
=================================

What:  Request/response models for users and login.
How:   The secret is accepted on write and at login, hashed by the user
       service, and never part of any response model.

Secret length:
    bcrypt only reads the first 72 bytes of a secret, so longer secrets
    (measured in UTF-8 bytes, not characters) are rejected here.
"""

from typing import Optional

from pydantic import Field, field_validator

from rondaguard.schemas.common import CamelModel, RootId

MAX_SECRET_BYTES = 72


def check_secret_length(value: Optional[str]) -> Optional[str]:
    """Reject secrets bcrypt cannot hash without truncation."""
    if value is not None and len(value.encode("utf-8")) > MAX_SECRET_BYTES:
        raise ValueError(f"password must be at most {MAX_SECRET_BYTES} bytes in UTF-8")
    return value


class UserIn(CamelModel):
    """
    A user as submitted by an administrator.

    `password` is required when the user is created; on later upserts it may
    be omitted to keep the current secret.
    """
    id: RootId
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: Optional[str] = Field(default=None, min_length=1, max_length=MAX_SECRET_BYTES)
    role: str = Field(min_length=1, max_length=50)
    active: bool = True

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: Optional[str]) -> Optional[str]:
        return check_secret_length(v)


class UserOut(CamelModel):
    """A user as returned by the API (no secret)."""
    id: str
    name: str
    email: str
    role: str
    active: bool


class UserStatusUpdate(CamelModel):
    """Body of PUT /api/users/{id}/status."""
    active: bool


class LoginRequest(CamelModel):
    """Body of POST /api/login."""
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=MAX_SECRET_BYTES)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return check_secret_length(v)
