"""Direct message and conversation Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from huddle.schemas.users import UserPublicOut

MAX_MESSAGE_CONTENT_LENGTH = 5000

HistoryOrder = Literal["asc", "desc"]


class SendMessageRequest(BaseModel):
    """Request body for POST /messages/{receiver_id}."""

    content: str = Field(..., min_length=1, max_length=MAX_MESSAGE_CONTENT_LENGTH)

    model_config = ConfigDict(str_strip_whitespace=True)


class MessageOut(BaseModel):
    """Response schema for a direct message."""

    id: UUID
    sender_id: UUID
    receiver_id: UUID
    content: str
    seen: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationOut(BaseModel):
    """One folded conversation: the partner, latest message, and unread count.

    unread_count counts only messages sent by the partner to the viewer that
    the viewer has not seen.
    """

    partner: UserPublicOut
    last_message: MessageOut
    unread_count: int


class MarkSeenOut(BaseModel):
    """Result of a bulk mark-seen."""

    updated: int
