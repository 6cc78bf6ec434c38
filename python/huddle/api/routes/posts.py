"""Post routes.

IMPORTANT: /posts/timeline and /posts/user/{user_id} are registered BEFORE
/posts/{post_id} to prevent path capture.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from huddle.api.deps import get_db
from huddle.auth.middleware import Viewer, get_viewer
from huddle.responses import success_response
from huddle.schemas.posts import CreatePostRequest, UpdatePostRequest
from huddle.services import posts as posts_service

router = APIRouter()


@router.post("/posts", status_code=201)
def create_post(
    req: CreatePostRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create a post."""
    result = posts_service.create_post(db, viewer.user_id, req)
    return success_response(result.model_dump(mode="json"))


@router.get("/posts/timeline")
def get_timeline(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """The viewer's and their friends' posts, newest first."""
    result = posts_service.timeline(db, viewer.user_id)
    return success_response([p.model_dump(mode="json") for p in result])


@router.get("/posts/user/{user_id}")
def list_user_posts(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """A user's posts, newest first. Visible to the user and their friends."""
    result = posts_service.list_user_posts(db, viewer.user_id, user_id)
    return success_response([p.model_dump(mode="json") for p in result])


@router.get("/posts/{post_id}")
def get_post(
    post_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get a post.

    Errors:
        E_POST_NOT_FOUND (404): No such post.
        E_FORBIDDEN (403): Viewer is neither the author nor a friend.
    """
    result = posts_service.get_post(db, viewer.user_id, post_id)
    return success_response(result.model_dump(mode="json"))


@router.put("/posts/{post_id}")
def update_post(
    post_id: UUID,
    req: UpdatePostRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Edit a post. Author only."""
    result = posts_service.update_post(db, viewer.user_id, post_id, req)
    return success_response(result.model_dump(mode="json"))


@router.delete("/posts/{post_id}", status_code=204)
def delete_post(
    post_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete a post and its comments and likes. Author only."""
    posts_service.delete_post(db, viewer.user_id, post_id)
    return Response(status_code=204)


@router.put("/posts/{post_id}/like")
def like_post(
    post_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Like a post. Idempotent."""
    result = posts_service.like_post(db, viewer.user_id, post_id)
    return success_response(result.model_dump(mode="json"))


@router.delete("/posts/{post_id}/like")
def unlike_post(
    post_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Remove the viewer's like. Idempotent."""
    result = posts_service.unlike_post(db, viewer.user_id, post_id)
    return success_response(result.model_dump(mode="json"))
