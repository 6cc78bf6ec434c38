"""Relationship engine: friend requests, friendships and blocks.

At most one edge exists between any two users, whatever its direction. This
is enforced by the UNIQUE(user_low_id, user_high_id) constraint, so a lost
check-then-insert race surfaces as an IntegrityError and maps to the same
conflict as the up-front check.

Transitions:
    none     --send_request-->      pending   (requester = sender)
    pending  --accept_request-->    accepted  (recipient only, counts +1)
    pending  --cancel_or_reject-->  none      (either party)
    accepted --remove_friend-->     none      (either party, counts -1)
    any      --block-->             blocked   (requester = blocker)
    blocked  --unblock-->           none      (blocker only)

friends_count always equals the number of accepted edges touching a user.
Every count change runs in the same transaction as the edge change.
"""

from uuid import UUID

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.db.models import Relationship, RelationshipStatus, User
from huddle.db.session import transaction
from huddle.errors import ApiErrorCode, ConflictError, InvalidRequestError, NotFoundError
from huddle.logging import get_logger
from huddle.schemas.relationships import (
    FriendOut,
    PendingRequestOut,
    RelationshipOut,
    RelationshipStatusOut,
)
from huddle.schemas.users import UserPublicOut, UserSearchOut
from huddle.services.users import get_user_or_404, resolve_users

logger = get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 50
MAX_SEARCH_LIMIT = 100

# =============================================================================
# Shared Helpers
# =============================================================================


def ordered_pair(a: UUID, b: UUID) -> tuple[UUID, UUID]:
    """Canonical (low, high) ordering of an unordered user pair."""
    return (a, b) if a < b else (b, a)


def status_label(edge: Relationship | None, viewer_id: UUID) -> str:
    """Direction-aware status of an edge as seen by viewer_id."""
    if edge is None:
        return "none"
    if edge.status == RelationshipStatus.pending.value:
        return "pending_sent" if edge.requester_id == viewer_id else "pending_received"
    return edge.status


def _find_pair_edge(
    db: Session, a: UUID, b: UUID, lock: bool = False
) -> Relationship | None:
    """Load the single edge between a and b in either direction."""
    low, high = ordered_pair(a, b)
    query = select(Relationship).where(
        Relationship.user_low_id == low, Relationship.user_high_id == high
    )
    if lock:
        query = query.with_for_update()
    return db.scalar(query)


def _adjust_friend_counts(db: Session, user_ids: list[UUID], delta: int) -> None:
    """Increment or decrement friends_count in SQL, never read-modify-write."""
    db.execute(
        update(User)
        .where(User.id.in_(user_ids))
        .values(friends_count=User.friends_count + delta)
    )


def _require_other_user(db: Session, viewer_id: UUID, other_id: UUID, action: str) -> None:
    if viewer_id == other_id:
        raise InvalidRequestError(ApiErrorCode.E_SELF_TARGET, f"Cannot {action} yourself")
    get_user_or_404(db, other_id)


def _edge_to_out(edge: Relationship) -> RelationshipOut:
    return RelationshipOut.model_validate(edge)


# =============================================================================
# Transitions
# =============================================================================


def send_request(db: Session, viewer_id: UUID, recipient_id: UUID) -> RelationshipOut:
    """Send a friend request from viewer to recipient.

    Raises:
        InvalidRequestError(E_SELF_TARGET): If viewer == recipient.
        NotFoundError(E_USER_NOT_FOUND): If the recipient does not exist.
        ConflictError(E_RELATIONSHIP_EXISTS): If any edge exists between the
            two users, in either direction and in any state.
    """
    _require_other_user(db, viewer_id, recipient_id, "send a friend request to")
    low, high = ordered_pair(viewer_id, recipient_id)

    try:
        with transaction(db):
            if _find_pair_edge(db, viewer_id, recipient_id) is not None:
                raise ConflictError(
                    ApiErrorCode.E_RELATIONSHIP_EXISTS, "Relationship already exists"
                )
            edge = Relationship(
                requester_id=viewer_id,
                recipient_id=recipient_id,
                user_low_id=low,
                user_high_id=high,
                status=RelationshipStatus.pending.value,
            )
            db.add(edge)
            db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            ApiErrorCode.E_RELATIONSHIP_EXISTS, "Relationship already exists"
        ) from exc

    logger.info(
        "friend_request_sent",
        requester_id=str(viewer_id),
        recipient_id=str(recipient_id),
    )
    return _edge_to_out(edge)


def accept_request(db: Session, viewer_id: UUID, requester_id: UUID) -> RelationshipOut:
    """Accept a pending request sent by requester_id to the viewer.

    Only the recipient can accept. The status change and both friend count
    increments commit together.

    Raises:
        NotFoundError(E_RELATIONSHIP_NOT_FOUND): If no pending request from
            requester_id to the viewer exists.
    """
    with transaction(db):
        edge = db.scalar(
            select(Relationship)
            .where(
                Relationship.requester_id == requester_id,
                Relationship.recipient_id == viewer_id,
                Relationship.status == RelationshipStatus.pending.value,
            )
            .with_for_update()
        )
        if edge is None:
            raise NotFoundError(ApiErrorCode.E_RELATIONSHIP_NOT_FOUND, "Friend request not found")

        edge.status = RelationshipStatus.accepted.value
        _adjust_friend_counts(db, [viewer_id, requester_id], +1)

    logger.info(
        "friend_request_accepted",
        requester_id=str(requester_id),
        recipient_id=str(viewer_id),
    )
    return _edge_to_out(edge)


def cancel_or_reject(db: Session, viewer_id: UUID, other_id: UUID) -> None:
    """Delete the pending request between viewer and other, whoever sent it.

    Cancelling (viewer sent it) and rejecting (viewer received it) are the
    same operation. Friend counts are untouched.

    Raises:
        NotFoundError(E_RELATIONSHIP_NOT_FOUND): If no pending edge exists.
    """
    with transaction(db):
        edge = _find_pair_edge(db, viewer_id, other_id, lock=True)
        if edge is None or edge.status != RelationshipStatus.pending.value:
            raise NotFoundError(ApiErrorCode.E_RELATIONSHIP_NOT_FOUND, "Friend request not found")
        direction = "cancelled" if edge.requester_id == viewer_id else "rejected"
        db.delete(edge)

    logger.info("friend_request_" + direction, other_user_id=str(other_id))


def remove_friend(db: Session, viewer_id: UUID, other_id: UUID) -> None:
    """End a friendship from either side and decrement both friend counts.

    Raises:
        NotFoundError(E_RELATIONSHIP_NOT_FOUND): If the two are not friends.
    """
    with transaction(db):
        edge = _find_pair_edge(db, viewer_id, other_id, lock=True)
        if edge is None or edge.status != RelationshipStatus.accepted.value:
            raise NotFoundError(ApiErrorCode.E_RELATIONSHIP_NOT_FOUND, "Friendship not found")
        db.delete(edge)
        db.flush()
        _adjust_friend_counts(db, [viewer_id, other_id], -1)

    logger.info("friend_removed", other_user_id=str(other_id))


def block(db: Session, viewer_id: UUID, target_id: UUID) -> RelationshipOut:
    """Block target, replacing any prior edge between the two.

    A prior accepted edge is removed with both friend counts decremented.
    A block already placed by the viewer is returned unchanged. A block
    already placed by the target stays in place: the pair is blocked either
    way, and the target's block must not be silently lifted.

    Raises:
        InvalidRequestError(E_SELF_TARGET): If viewer == target.
        NotFoundError(E_USER_NOT_FOUND): If the target does not exist.
    """
    _require_other_user(db, viewer_id, target_id, "block")
    low, high = ordered_pair(viewer_id, target_id)

    try:
        with transaction(db):
            existing = _find_pair_edge(db, viewer_id, target_id, lock=True)

            if existing is not None and existing.status == RelationshipStatus.blocked.value:
                return _edge_to_out(existing)

            if existing is not None:
                was_friend = existing.status == RelationshipStatus.accepted.value
                db.delete(existing)
                # The unit of work orders INSERTs before DELETEs; the pair
                # must be free before the blocked edge goes in.
                db.flush()
                if was_friend:
                    _adjust_friend_counts(db, [viewer_id, target_id], -1)

            edge = Relationship(
                requester_id=viewer_id,
                recipient_id=target_id,
                user_low_id=low,
                user_high_id=high,
                status=RelationshipStatus.blocked.value,
            )
            db.add(edge)
            db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            ApiErrorCode.E_RELATIONSHIP_EXISTS, "Relationship changed concurrently"
        ) from exc

    logger.info("user_blocked", blocked_user_id=str(target_id))
    return _edge_to_out(edge)


def unblock(db: Session, viewer_id: UUID, target_id: UUID) -> None:
    """Lift a block the viewer placed on target.

    Raises:
        NotFoundError(E_RELATIONSHIP_NOT_FOUND): If the viewer has not blocked
            target (including when the target blocked the viewer).
    """
    with transaction(db):
        result = db.execute(
            delete(Relationship).where(
                Relationship.requester_id == viewer_id,
                Relationship.recipient_id == target_id,
                Relationship.status == RelationshipStatus.blocked.value,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError(ApiErrorCode.E_RELATIONSHIP_NOT_FOUND, "Block not found")

    logger.info("user_unblocked", unblocked_user_id=str(target_id))


# =============================================================================
# Queries
# =============================================================================


def status_for(db: Session, viewer_id: UUID, other_id: UUID) -> RelationshipStatusOut:
    """Return the viewer's direction-aware status with other_id."""
    edge = None if viewer_id == other_id else _find_pair_edge(db, viewer_id, other_id)
    return RelationshipStatusOut(user_id=other_id, status=status_label(edge, viewer_id))


def are_friends(db: Session, a: UUID, b: UUID) -> bool:
    if a == b:
        return False
    edge = _find_pair_edge(db, a, b)
    return edge is not None and edge.status == RelationshipStatus.accepted.value


def friend_ids(db: Session, user_id: UUID) -> list[UUID]:
    """Ids of everyone with an accepted edge to user_id."""
    rows = db.execute(
        select(Relationship.requester_id, Relationship.recipient_id).where(
            Relationship.status == RelationshipStatus.accepted.value,
            or_(Relationship.requester_id == user_id, Relationship.recipient_id == user_id),
        )
    ).all()
    return [recipient if requester == user_id else requester for requester, recipient in rows]


def list_friends(db: Session, viewer_id: UUID) -> list[FriendOut]:
    """List the viewer's friends, most recently befriended first."""
    edges = db.scalars(
        select(Relationship)
        .where(
            Relationship.status == RelationshipStatus.accepted.value,
            or_(
                Relationship.requester_id == viewer_id,
                Relationship.recipient_id == viewer_id,
            ),
        )
        .order_by(Relationship.updated_at.desc(), Relationship.id.desc())
    ).all()

    profiles = resolve_users(db, (e.other_party(viewer_id) for e in edges))
    return [
        FriendOut(
            relationship_id=e.id,
            user=profiles[e.other_party(viewer_id)],
            since=e.updated_at,
        )
        for e in edges
        if e.other_party(viewer_id) in profiles
    ]


def list_pending(db: Session, viewer_id: UUID) -> list[PendingRequestOut]:
    """List requests awaiting the viewer's answer, newest first."""
    edges = db.scalars(
        select(Relationship)
        .where(
            Relationship.recipient_id == viewer_id,
            Relationship.status == RelationshipStatus.pending.value,
        )
        .order_by(Relationship.created_at.desc(), Relationship.id.desc())
    ).all()

    profiles = resolve_users(db, (e.requester_id for e in edges))
    return [
        PendingRequestOut(
            relationship_id=e.id,
            requester=profiles[e.requester_id],
            created_at=e.created_at,
        )
        for e in edges
        if e.requester_id in profiles
    ]


def search_users(
    db: Session,
    viewer_id: UUID,
    search: str | None,
    limit: int = DEFAULT_SEARCH_LIMIT,
    offset: int = 0,
) -> list[UserSearchOut]:
    """Find other users by username or name, annotated with relationship status.

    Case-insensitive substring match on username, first name or last name.
    An empty search lists everyone except the viewer. relationship_status is
    None when no edge exists.

    Results are ordered by username and paged with limit/offset; limit is
    clamped to MAX_SEARCH_LIMIT.
    """
    limit = min(limit, MAX_SEARCH_LIMIT)
    query = select(User).where(User.id != viewer_id)
    term = (search or "").strip()
    if term:
        query = query.where(
            or_(
                User.username.icontains(term, autoescape=True),
                User.first_name.icontains(term, autoescape=True),
                User.last_name.icontains(term, autoescape=True),
            )
        )
    users = db.scalars(
        query.order_by(User.username.asc()).offset(offset).limit(limit)
    ).all()
    if not users:
        return []

    found_ids = [u.id for u in users]
    edges = db.scalars(
        select(Relationship).where(
            or_(
                and_(
                    Relationship.requester_id == viewer_id,
                    Relationship.recipient_id.in_(found_ids),
                ),
                and_(
                    Relationship.recipient_id == viewer_id,
                    Relationship.requester_id.in_(found_ids),
                ),
            )
        )
    ).all()
    by_other = {e.other_party(viewer_id): e for e in edges}

    return [
        UserSearchOut(
            **UserPublicOut.model_validate(u).model_dump(),
            relationship_status=(
                status_label(by_other[u.id], viewer_id) if u.id in by_other else None
            ),
        )
        for u in users
    ]
