"""User and authentication Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
MAX_USERNAME_LENGTH = 50
MAX_BIO_LENGTH = 500

# Deliberately loose: one "@", something on each side, a dot in the domain
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"

# =============================================================================
# Request Schemas
# =============================================================================


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    username: str = Field(
        ..., min_length=1, max_length=MAX_USERNAME_LENGTH, pattern=USERNAME_PATTERN
    )
    email: str = Field(..., max_length=254, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

    model_config = ConfigDict(str_strip_whitespace=True)


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1, max_length=MAX_PASSWORD_LENGTH)


class UpdateProfileRequest(BaseModel):
    """Request body for PATCH /me. Only fields present in the body are changed."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=MAX_BIO_LENGTH)
    profile_picture: str | None = Field(default=None, max_length=2048)
    cover_photo: str | None = Field(default=None, max_length=2048)
    is_private: bool | None = None

    model_config = ConfigDict(str_strip_whitespace=True)


# =============================================================================
# Response Schemas
# =============================================================================


class UserPublicOut(BaseModel):
    """Public profile fields, safe to show to any authenticated user."""

    id: UUID
    username: str
    first_name: str | None = None
    last_name: str | None = None
    profile_picture: str | None = None
    bio: str | None = None
    friends_count: int

    model_config = ConfigDict(from_attributes=True)


class UserPrivateOut(UserPublicOut):
    """Full profile, returned only to the user themselves."""

    email: str
    cover_photo: str | None = None
    is_private: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class AuthOut(BaseModel):
    """Response for register and login."""

    user: UserPrivateOut
    token: str
    expires_at: str


class UserSearchOut(UserPublicOut):
    """Search result annotated with the viewer's relationship status.

    relationship_status is None when no edge exists.
    """

    relationship_status: str | None = None
