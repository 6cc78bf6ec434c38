"""Post and comment Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from huddle.schemas.users import UserPublicOut

MAX_POST_CONTENT_LENGTH = 5000
MAX_COMMENT_CONTENT_LENGTH = 2000
MAX_MEDIA_REF_LENGTH = 2048

# =============================================================================
# Request Schemas
# =============================================================================


class CreatePostRequest(BaseModel):
    """Request body for POST /posts."""

    content: str = Field(..., min_length=1, max_length=MAX_POST_CONTENT_LENGTH)
    media: str | None = Field(default=None, max_length=MAX_MEDIA_REF_LENGTH)

    model_config = ConfigDict(str_strip_whitespace=True)


class UpdatePostRequest(BaseModel):
    """Request body for PUT /posts/{post_id}. Absent fields are left unchanged."""

    content: str | None = Field(default=None, min_length=1, max_length=MAX_POST_CONTENT_LENGTH)
    media: str | None = Field(default=None, max_length=MAX_MEDIA_REF_LENGTH)

    model_config = ConfigDict(str_strip_whitespace=True)


class CommentRequest(BaseModel):
    """Request body for creating or updating a comment."""

    content: str = Field(..., min_length=1, max_length=MAX_COMMENT_CONTENT_LENGTH)

    model_config = ConfigDict(str_strip_whitespace=True)


# =============================================================================
# Response Schemas
# =============================================================================


class PostOut(BaseModel):
    """Response schema for a post, with the author's public profile."""

    id: UUID
    user_id: UUID
    content: str
    media: str | None = None
    likes_count: int
    created_at: datetime
    updated_at: datetime
    author: UserPublicOut | None = None


class CommentOut(BaseModel):
    """Response schema for a comment, with the author's public profile."""

    id: UUID
    post_id: UUID
    user_id: UUID
    content: str
    created_at: datetime
    updated_at: datetime
    author: UserPublicOut | None = None
