"""Registration and login routes (public).

Both return the user with a session token in the body and echo the token in
the X-Auth-Token response header, which existing clients read.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from huddle.api.deps import get_db
from huddle.responses import success_response
from huddle.schemas.users import LoginRequest, RegisterRequest
from huddle.services import auth as auth_service

router = APIRouter()

AUTH_TOKEN_HEADER = "X-Auth-Token"


@router.post("/auth/register", status_code=201)
def register(
    req: RegisterRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create an account.

    Errors:
        E_USER_EXISTS (400): Username or email already registered.
        E_INVALID_REQUEST (400): Invalid username, email or password.
    """
    result = auth_service.register(db, req)
    response.headers[AUTH_TOKEN_HEADER] = result.token
    return success_response(result.model_dump(mode="json"))


@router.post("/auth/login")
def login(
    req: LoginRequest,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Exchange email and password for a session token.

    Errors:
        E_INVALID_CREDENTIALS (401): Unknown email or wrong password.
    """
    result = auth_service.login(db, req)
    response.headers[AUTH_TOKEN_HEADER] = result.token
    return success_response(result.model_dump(mode="json"))
