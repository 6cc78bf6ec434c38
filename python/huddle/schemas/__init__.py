"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from huddle.schemas.messages import (
    ConversationOut,
    MarkSeenOut,
    MessageOut,
    SendMessageRequest,
)
from huddle.schemas.posts import (
    CommentOut,
    CommentRequest,
    CreatePostRequest,
    PostOut,
    UpdatePostRequest,
)
from huddle.schemas.relationships import (
    FriendOut,
    PendingRequestOut,
    RelationshipOut,
    RelationshipStatusOut,
)
from huddle.schemas.users import (
    AuthOut,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserPrivateOut,
    UserPublicOut,
    UserSearchOut,
)

__all__ = [
    # Users
    "RegisterRequest",
    "LoginRequest",
    "UpdateProfileRequest",
    "UserPublicOut",
    "UserPrivateOut",
    "UserSearchOut",
    "AuthOut",
    # Relationships
    "RelationshipOut",
    "RelationshipStatusOut",
    "FriendOut",
    "PendingRequestOut",
    # Posts & comments
    "CreatePostRequest",
    "UpdatePostRequest",
    "CommentRequest",
    "PostOut",
    "CommentOut",
    # Messages
    "SendMessageRequest",
    "MessageOut",
    "ConversationOut",
    "MarkSeenOut",
]
