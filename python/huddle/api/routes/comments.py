"""Comment routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from huddle.api.deps import get_db
from huddle.auth.middleware import Viewer, get_viewer
from huddle.responses import success_response
from huddle.schemas.posts import CommentRequest
from huddle.services import comments as comments_service

router = APIRouter()


@router.get("/comments/post/{post_id}")
def list_comments(
    post_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Comments on a post, newest first. Empty list for a missing post.

    Errors:
        E_FORBIDDEN (403): Viewer is neither the post's author nor a friend.
    """
    result = comments_service.list_comments(db, viewer.user_id, post_id)
    return success_response([c.model_dump(mode="json") for c in result])


@router.post("/comments/{post_id}", status_code=201)
def create_comment(
    post_id: UUID,
    req: CommentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Comment on a post.

    Errors:
        E_POST_NOT_FOUND (404): No such post.
        E_FORBIDDEN (403): Viewer is neither the post's author nor a friend.
    """
    result = comments_service.create_comment(db, viewer.user_id, post_id, req.content)
    return success_response(result.model_dump(mode="json"))


@router.put("/comments/{comment_id}")
def update_comment(
    comment_id: UUID,
    req: CommentRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Edit a comment. Author only."""
    result = comments_service.update_comment(db, viewer.user_id, comment_id, req.content)
    return success_response(result.model_dump(mode="json"))


@router.delete("/comments/{comment_id}", status_code=204)
def delete_comment(
    comment_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete a comment. Author only."""
    comments_service.delete_comment(db, viewer.user_id, comment_id)
    return Response(status_code=204)
