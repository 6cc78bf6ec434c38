"""Relationship routes: friend requests, friendships and blocks.

Routes are transport-only:
- Extract viewer from request.state
- Call exactly one service function
- Return success(...) or raise ApiError

Path ids always name the *other* user; the viewer is implied.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from huddle.api.deps import get_db
from huddle.auth.middleware import Viewer, get_viewer
from huddle.responses import success_response
from huddle.services import relationships as relationships_service
from huddle.services.relationships import DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT

router = APIRouter()


# =============================================================================
# Queries
# =============================================================================


@router.get("/relationships/friends")
def list_friends(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List the viewer's friends with their public profiles."""
    result = relationships_service.list_friends(db, viewer.user_id)
    return success_response([f.model_dump(mode="json") for f in result])


@router.get("/relationships/pending")
def list_pending(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List friend requests awaiting the viewer's answer."""
    result = relationships_service.list_pending(db, viewer.user_id)
    return success_response([p.model_dump(mode="json") for p in result])


@router.get("/relationships/users")
def search_users(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    search: Annotated[str | None, Query(max_length=100)] = None,
    limit: Annotated[
        int, Query(ge=1, le=MAX_SEARCH_LIMIT, description="Maximum results (1-100)")
    ] = DEFAULT_SEARCH_LIMIT,
    offset: Annotated[int, Query(ge=0, description="Results to skip")] = 0,
) -> dict:
    """Search other users, each annotated with the viewer's relationship status.

    Ordered by username. Page through every match with limit and offset.
    """
    result = relationships_service.search_users(
        db, viewer.user_id, search, limit=limit, offset=offset
    )
    return success_response([u.model_dump(mode="json") for u in result])


@router.get("/relationships/status/{user_id}")
def get_status(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Direction-aware status: none, accepted, blocked, pending_sent, pending_received."""
    result = relationships_service.status_for(db, viewer.user_id, user_id)
    return success_response(result.model_dump(mode="json"))


# =============================================================================
# Transitions
# =============================================================================


@router.post("/relationships/request/{user_id}", status_code=201)
def send_request(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Send a friend request.

    Errors:
        E_SELF_TARGET (400): Request to self.
        E_USER_NOT_FOUND (404): No such user.
        E_RELATIONSHIP_EXISTS (400): Any relationship already exists.
    """
    result = relationships_service.send_request(db, viewer.user_id, user_id)
    return success_response(result.model_dump(mode="json"))


@router.put("/relationships/accept/{user_id}")
def accept_request(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Accept the pending request user_id sent to the viewer.

    Errors:
        E_RELATIONSHIP_NOT_FOUND (404): No such pending request.
    """
    result = relationships_service.accept_request(db, viewer.user_id, user_id)
    return success_response(result.model_dump(mode="json"))


@router.delete("/relationships/request/{user_id}", status_code=204)
def cancel_or_reject_request(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Cancel a sent request or reject a received one."""
    relationships_service.cancel_or_reject(db, viewer.user_id, user_id)
    return Response(status_code=204)


@router.delete("/relationships/friend/{user_id}", status_code=204)
def remove_friend(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """End a friendship."""
    relationships_service.remove_friend(db, viewer.user_id, user_id)
    return Response(status_code=204)


@router.post("/relationships/block/{user_id}")
def block_user(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Block a user, replacing any friendship or pending request."""
    result = relationships_service.block(db, viewer.user_id, user_id)
    return success_response(result.model_dump(mode="json"))


@router.delete("/relationships/block/{user_id}", status_code=204)
def unblock_user(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Lift a block the viewer placed."""
    relationships_service.unblock(db, viewer.user_id, user_id)
    return Response(status_code=204)
