"""SQLAlchemy ORM models for Huddle.

Defines all database tables using SQLAlchemy 2.x declarative patterns.
Status enums are Python enums stored as text guarded by CHECK constraints,
so the schema stays portable between PostgreSQL and SQLite.

Timestamps are assigned by the application (UTC, microsecond precision) rather
than by the server, so newest-first ordering is stable on every dialect.
"""

from datetime import UTC, datetime
from enum import Enum as PyEnum
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    """Current UTC time, used for all created_at/updated_at columns."""
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator):
    """Timezone-aware timestamp that always loads as an aware UTC datetime.

    SQLite drops tzinfo on storage; values are normalized to UTC on the way in
    and re-tagged as UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(UTC)
            if dialect.name == "sqlite":
                value = value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Enums
# =============================================================================


class RelationshipStatus(str, PyEnum):
    """Stored relationship edge states.

    States:
        pending: Friend request sent, awaiting the recipient
        accepted: Both users are friends
        blocked: Requester has blocked recipient
    """

    pending = "pending"
    accepted = "accepted"
    blocked = "blocked"


# =============================================================================
# Models
# =============================================================================


class User(Base):
    """User account model.

    The password is stored only as an argon2id hash (see huddle.auth.passwords).
    friends_count is denormalized and maintained by the relationship engine.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_photo: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    friends_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("friends_count >= 0", name="ck_users_friends_count_nonnegative"),
    )


class Relationship(Base):
    """Relationship edge between two users.

    requester/recipient carry direction (who asked, who blocked).
    user_low_id/user_high_id hold the same pair in canonical order so the
    unordered pair is unique at the storage level: at most one edge may exist
    between two users regardless of direction.
    """

    __tablename__ = "relationships"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    requester_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    recipient_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    user_low_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    user_high_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("requester_id", "recipient_id", name="uq_relationships_direction"),
        UniqueConstraint("user_low_id", "user_high_id", name="uq_relationships_pair"),
        CheckConstraint("requester_id <> recipient_id", name="ck_relationships_not_self"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'blocked')",
            name="ck_relationships_status",
        ),
        Index("ix_relationships_recipient_status", "recipient_id", "status"),
        Index("ix_relationships_requester_status", "requester_id", "status"),
    )

    def other_party(self, user_id: UUID) -> UUID:
        """Return the counterpart of user_id on this edge."""
        return self.recipient_id if self.requester_id == user_id else self.requester_id


class Post(Base):
    """Post authored by exactly one user."""

    __tablename__ = "posts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    media: Mapped[str | None] = mapped_column(Text, nullable=True)
    likes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("likes_count >= 0", name="ck_posts_likes_count_nonnegative"),
        Index("ix_posts_user_created", "user_id", "created_at"),
    )


class PostLike(Base):
    """One like of a post by a user. Backs the denormalized posts.likes_count."""

    __tablename__ = "post_likes"

    post_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )


class Comment(Base):
    """Comment attached to exactly one post."""

    __tablename__ = "comments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    post_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_comments_post_created", "post_id", "created_at"),
        Index("ix_comments_user_created", "user_id", "created_at"),
    )


class Message(Base):
    """Direct message from sender to receiver."""

    __tablename__ = "messages"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    sender_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    receiver_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    seen: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        Index("ix_messages_sender_created", "sender_id", "created_at"),
        Index("ix_messages_receiver_created", "receiver_id", "created_at"),
        Index("ix_messages_pair_created", "sender_id", "receiver_id", "created_at"),
    )
