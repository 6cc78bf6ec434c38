"""Current user endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from huddle.api.deps import get_db
from huddle.auth.middleware import Viewer, get_viewer
from huddle.responses import success_response
from huddle.schemas.users import UpdateProfileRequest
from huddle.services import users as users_service

router = APIRouter()


@router.get("/me")
def get_me(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get the authenticated user's full profile (includes email)."""
    result = users_service.get_me(db, viewer.user_id)
    return success_response(result.model_dump(mode="json"))


@router.patch("/me")
def update_me(
    req: UpdateProfileRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Partially update the authenticated user's profile."""
    result = users_service.update_profile(db, viewer.user_id, req)
    return success_response(result.model_dump(mode="json"))
