"""User profile routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from huddle.api.deps import get_db
from huddle.auth.middleware import Viewer, get_viewer
from huddle.responses import success_response
from huddle.services import users as users_service

router = APIRouter()


@router.get("/users/{user_id}")
def get_user(
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get a user's public profile.

    Errors:
        E_USER_NOT_FOUND (404): No such user.
    """
    result = users_service.get_user(db, user_id)
    return success_response(result.model_dump(mode="json"))
