"""Registration and login service layer.

Wraps the identity store with session token issuance so each auth route
calls exactly one service function.
"""

from sqlalchemy.orm import Session

from huddle.auth.tokens import mint_session_token
from huddle.schemas.users import AuthOut, LoginRequest, RegisterRequest, UserPrivateOut
from huddle.services import users as users_service


def _auth_out(user) -> AuthOut:
    session = mint_session_token(user.id)
    return AuthOut(
        user=UserPrivateOut.model_validate(user),
        token=session["token"],
        expires_at=session["expires_at"],
    )


def register(db: Session, req: RegisterRequest) -> AuthOut:
    """Create an account and return it with a fresh session token."""
    user = users_service.create_user(
        db,
        username=req.username,
        email=req.email,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
    )
    return _auth_out(user)


def login(db: Session, req: LoginRequest) -> AuthOut:
    """Verify credentials and return the user with a fresh session token."""
    user = users_service.authenticate(db, req.email, req.password)
    return _auth_out(user)
