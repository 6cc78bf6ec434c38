"""Database module for Huddle.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from huddle.db.engine import create_db_engine, get_engine
from huddle.db.models import (
    Base,
    Comment,
    Message,
    Post,
    PostLike,
    Relationship,
    RelationshipStatus,
    User,
)
from huddle.db.session import get_db, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "get_db",
    "transaction",
    # Base
    "Base",
    # Enums
    "RelationshipStatus",
    # Models
    "User",
    "Relationship",
    "Post",
    "PostLike",
    "Comment",
    "Message",
]
