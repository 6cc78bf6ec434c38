"""Huddle schema - users, relationships, posts, post_likes, comments, messages

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Relationship pairs are unique regardless of direction via the canonical
(user_low_id, user_high_id) columns. Timestamps are written by the
application so they carry no server defaults.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # ==========================================================================
    # users table
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("profile_picture", sa.Text(), nullable=True),
        sa.Column("cover_photo", sa.Text(), nullable=True),
        sa.Column("is_private", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("friends_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_login_at", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint("friends_count >= 0", name="ck_users_friends_count_nonnegative"),
    )

    # ==========================================================================
    # relationships table
    # ==========================================================================
    op.create_table(
        "relationships",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("requester_id", sa.UUID(), nullable=False),
        sa.Column("recipient_id", sa.UUID(), nullable=False),
        sa.Column("user_low_id", sa.UUID(), nullable=False),
        sa.Column("user_high_id", sa.UUID(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["requester_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("requester_id", "recipient_id", name="uq_relationships_direction"),
        sa.UniqueConstraint("user_low_id", "user_high_id", name="uq_relationships_pair"),
        sa.CheckConstraint("requester_id <> recipient_id", name="ck_relationships_not_self"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'blocked')",
            name="ck_relationships_status",
        ),
        # The pair columns must be the canonical ordering of the two parties
        sa.CheckConstraint(
            "user_low_id = LEAST(requester_id, recipient_id) "
            "AND user_high_id = GREATEST(requester_id, recipient_id)",
            name="ck_relationships_pair_canonical",
        ),
    )
    op.create_index(
        "ix_relationships_recipient_status", "relationships", ["recipient_id", "status"]
    )
    op.create_index(
        "ix_relationships_requester_status", "relationships", ["requester_id", "status"]
    )

    # ==========================================================================
    # posts / post_likes tables
    # ==========================================================================
    op.create_table(
        "posts",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("media", sa.Text(), nullable=True),
        sa.Column("likes_count", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("likes_count >= 0", name="ck_posts_likes_count_nonnegative"),
    )
    op.create_index("ix_posts_user_created", "posts", ["user_id", "created_at"])

    op.create_table(
        "post_likes",
        sa.Column("post_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("post_id", "user_id"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )

    # ==========================================================================
    # comments table
    # ==========================================================================
    op.create_table(
        "comments",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("post_id", sa.UUID(), nullable=False),
        sa.Column("user_id", sa.UUID(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_comments_post_created", "comments", ["post_id", "created_at"])
    op.create_index("ix_comments_user_created", "comments", ["user_id", "created_at"])

    # ==========================================================================
    # messages table
    # ==========================================================================
    op.create_table(
        "messages",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("sender_id", sa.UUID(), nullable=False),
        sa.Column("receiver_id", sa.UUID(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("seen", sa.Boolean(), server_default="false", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["receiver_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_messages_sender_created", "messages", ["sender_id", "created_at"])
    op.create_index("ix_messages_receiver_created", "messages", ["receiver_id", "created_at"])
    op.create_index(
        "ix_messages_pair_created", "messages", ["sender_id", "receiver_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("messages")
    op.drop_table("comments")
    op.drop_table("post_likes")
    op.drop_table("posts")
    op.drop_table("relationships")
    op.drop_table("users")
