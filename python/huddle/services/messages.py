"""Direct messaging service layer.

Messages are directed (sender -> receiver) and carry a one-way seen flag.
A conversation is the set of messages between two users in both
directions; conversations_for folds a user's messages into one summary per
partner.

Service functions correspond 1:1 with route handlers.
"""

from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.orm import Session

from huddle.db.models import Message, utcnow
from huddle.db.session import transaction
from huddle.errors import (
    ApiErrorCode,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from huddle.logging import get_logger
from huddle.schemas.messages import (
    ConversationOut,
    HistoryOrder,
    MarkSeenOut,
    MessageOut,
)
from huddle.services.users import get_user_or_404, resolve_users

logger = get_logger(__name__)


def _between(a: UUID, b: UUID):
    """Filter for messages exchanged between a and b in either direction."""
    return or_(
        and_(Message.sender_id == a, Message.receiver_id == b),
        and_(Message.sender_id == b, Message.receiver_id == a),
    )


def send_message(db: Session, viewer_id: UUID, receiver_id: UUID, content: str) -> MessageOut:
    """Send a message from the viewer to receiver_id.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): If the receiver does not exist.
        InvalidRequestError(E_SELF_TARGET): If viewer == receiver.
        InvalidRequestError(E_INVALID_REQUEST): If content is blank.
    """
    get_user_or_404(db, receiver_id)
    if viewer_id == receiver_id:
        raise InvalidRequestError(ApiErrorCode.E_SELF_TARGET, "Cannot message yourself")

    content = content.strip()
    if not content:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Message content is required")

    message = Message(sender_id=viewer_id, receiver_id=receiver_id, content=content, seen=False)
    with transaction(db):
        db.add(message)
        db.flush()

    logger.info("message_sent", message_id=str(message.id), receiver_id=str(receiver_id))
    return MessageOut.model_validate(message)


def get_history(
    db: Session, viewer_id: UUID, other_id: UUID, order: HistoryOrder = "asc"
) -> list[MessageOut]:
    """Return every message between viewer and other.

    Ordered oldest-first by default (display order); order="desc" gives
    newest-first. Ties on created_at break on id so the order is total.
    Pure read: seen flags are not touched.
    """
    if order == "desc":
        ordering = (Message.created_at.desc(), Message.id.desc())
    else:
        ordering = (Message.created_at.asc(), Message.id.asc())

    messages = db.scalars(
        select(Message).where(_between(viewer_id, other_id)).order_by(*ordering)
    ).all()
    return [MessageOut.model_validate(m) for m in messages]


def mark_seen(db: Session, viewer_id: UUID, sender_id: UUID) -> MarkSeenOut:
    """Mark every unseen message from sender_id to the viewer as seen.

    Idempotent: a second call flips nothing and returns updated=0.
    Messages the viewer sent are never touched.
    """
    with transaction(db):
        result = db.execute(
            update(Message)
            .where(
                Message.sender_id == sender_id,
                Message.receiver_id == viewer_id,
                Message.seen.is_(False),
            )
            .values(seen=True, updated_at=utcnow())
        )

    if result.rowcount:
        logger.info("messages_marked_seen", sender_id=str(sender_id), count=result.rowcount)
    return MarkSeenOut(updated=result.rowcount)


def history(
    db: Session,
    viewer_id: UUID,
    other_id: UUID,
    mark_seen_on_read: bool = False,
    order: HistoryOrder = "asc",
) -> list[MessageOut]:
    """Read a conversation, optionally marking the partner's messages seen.

    Composition of mark_seen and get_history. The returned messages reflect
    the state after marking.
    """
    if mark_seen_on_read:
        mark_seen(db, viewer_id, other_id)
    return get_history(db, viewer_id, other_id, order=order)


def fold_conversations(
    viewer_id: UUID, messages: list[Message]
) -> list[tuple[UUID, Message, int]]:
    """Fold a user's messages into (partner_id, last_message, unread_count).

    Messages are sorted newest-first here rather than trusting storage
    order: the first message met for a partner is its last message, and
    every unseen message from that partner adds to its unread count.
    Output keeps first-seen order, i.e. most recent conversation first.
    """
    ordered = sorted(messages, key=lambda m: (m.created_at, m.id), reverse=True)

    last: dict[UUID, Message] = {}
    unread: dict[UUID, int] = {}
    for message in ordered:
        partner_id = message.receiver_id if message.sender_id == viewer_id else message.sender_id
        if partner_id not in last:
            last[partner_id] = message
            unread[partner_id] = 0
        if message.sender_id == partner_id and not message.seen:
            unread[partner_id] += 1

    return [(partner_id, last[partner_id], unread[partner_id]) for partner_id in last]


def conversations_for(db: Session, viewer_id: UUID) -> list[ConversationOut]:
    """One summary per conversation partner, most recent conversation first."""
    messages = db.scalars(
        select(Message).where(
            or_(Message.sender_id == viewer_id, Message.receiver_id == viewer_id)
        )
    ).all()

    folded = fold_conversations(viewer_id, list(messages))
    profiles = resolve_users(db, (partner_id for partner_id, _, _ in folded))

    return [
        ConversationOut(
            partner=profiles[partner_id],
            last_message=MessageOut.model_validate(last_message),
            unread_count=unread_count,
        )
        for partner_id, last_message, unread_count in folded
        if partner_id in profiles
    ]


def delete_message(db: Session, viewer_id: UUID, message_id: UUID) -> None:
    """Delete a message. Only its sender may delete it.

    Raises:
        NotFoundError(E_MESSAGE_NOT_FOUND): If the message does not exist.
        ForbiddenError(E_NOT_OWNER): If the viewer is not the sender.
    """
    message = db.get(Message, message_id)
    if message is None:
        raise NotFoundError(ApiErrorCode.E_MESSAGE_NOT_FOUND, "Message not found")
    if message.sender_id != viewer_id:
        raise ForbiddenError(ApiErrorCode.E_NOT_OWNER, "Only the sender can delete a message")

    with transaction(db):
        db.delete(message)

    logger.info("message_deleted", message_id=str(message_id))
