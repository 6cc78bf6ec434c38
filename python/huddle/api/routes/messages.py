"""Direct message routes.

IMPORTANT: Static routes (/messages/conversations, /messages/conversation/...)
are registered BEFORE the dynamic DELETE /messages/{message_id}.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from huddle.api.deps import get_db
from huddle.auth.middleware import Viewer, get_viewer
from huddle.responses import success_response
from huddle.schemas.messages import HistoryOrder, SendMessageRequest
from huddle.services import messages as messages_service

router = APIRouter()


@router.get("/messages/conversations")
def list_conversations(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """One entry per partner: partner profile, last message, unread count.

    Ordered by last message, most recent first.
    """
    result = messages_service.conversations_for(db, viewer.user_id)
    return success_response([c.model_dump(mode="json") for c in result])


@router.get("/messages/conversation/{user_id}")
def get_conversation(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """All messages with user_id, oldest first. Does not mark anything seen."""
    result = messages_service.get_history(db, viewer.user_id, user_id, order="asc")
    return success_response([m.model_dump(mode="json") for m in result])


@router.get("/messages/history/{user_id}")
def get_history(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    mark_seen: Annotated[bool, Query(alias="mark_seen")] = False,
    order: Annotated[HistoryOrder, Query()] = "desc",
) -> dict:
    """All messages with user_id, newest first unless order=asc.

    With mark_seen=true, user_id's messages to the viewer are marked seen
    first and returned in their seen state.
    """
    result = messages_service.history(
        db, viewer.user_id, user_id, mark_seen_on_read=mark_seen, order=order
    )
    return success_response([m.model_dump(mode="json") for m in result])


@router.put("/messages/seen/{sender_id}")
def mark_seen(
    sender_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Mark every unseen message from sender_id to the viewer as seen."""
    result = messages_service.mark_seen(db, viewer.user_id, sender_id)
    return success_response(result.model_dump(mode="json"))


@router.post("/messages/{receiver_id}", status_code=201)
def send_message(
    receiver_id: UUID,
    req: SendMessageRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Send a direct message.

    Errors:
        E_USER_NOT_FOUND (404): No such receiver.
        E_SELF_TARGET (400): Message to self.
    """
    result = messages_service.send_message(db, viewer.user_id, receiver_id, req.content)
    return success_response(result.model_dump(mode="json"))


@router.delete("/messages/{message_id}", status_code=204)
def delete_message(
    message_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete a message the viewer sent.

    Errors:
        E_MESSAGE_NOT_FOUND (404): No such message.
        E_NOT_OWNER (403): Viewer is not the sender.
    """
    messages_service.delete_message(db, viewer.user_id, message_id)
    return Response(status_code=204)
