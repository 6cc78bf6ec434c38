"""Relationship (friends/blocks) Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from huddle.schemas.users import UserPublicOut

# Stored edge states - must match DB constraint
RelationshipStatusValue = Literal["pending", "accepted", "blocked"]

# Direction-aware status as seen by one party
RelationshipStatusLabel = Literal[
    "none", "accepted", "blocked", "pending_sent", "pending_received"
]


class RelationshipOut(BaseModel):
    """Response schema for a stored relationship edge."""

    id: UUID
    requester_id: UUID
    recipient_id: UUID
    status: RelationshipStatusValue
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RelationshipStatusOut(BaseModel):
    """The viewer's relationship status with another user."""

    user_id: UUID
    status: RelationshipStatusLabel


class FriendOut(BaseModel):
    """An accepted relationship resolved to the counterpart's profile."""

    relationship_id: UUID
    user: UserPublicOut
    since: datetime


class PendingRequestOut(BaseModel):
    """A friend request awaiting the viewer's response."""

    relationship_id: UUID
    requester: UserPublicOut
    created_at: datetime
