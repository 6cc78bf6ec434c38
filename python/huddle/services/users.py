"""User (identity store) service layer.

Owns account creation, credential checks, profile reads/writes and the
batched id -> profile resolution used by the relationship, messaging and
content services.

Routes are transport-only and call exactly one service function.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.auth.passwords import hash_password, verify_password
from huddle.db.models import User, utcnow
from huddle.db.session import transaction
from huddle.errors import (
    ApiError,
    ApiErrorCode,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from huddle.logging import get_logger
from huddle.schemas.users import (
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
    UpdateProfileRequest,
    UserPrivateOut,
    UserPublicOut,
)

logger = get_logger(__name__)


INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


# =============================================================================
# Shared Helpers
# =============================================================================


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_or_404(db: Session, user_id: UUID) -> User:
    """Load a user by id.

    Raises:
        NotFoundError(E_USER_NOT_FOUND): If the user does not exist.
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(ApiErrorCode.E_USER_NOT_FOUND, "User not found")
    return user


def resolve_users(db: Session, user_ids: Iterable[UUID]) -> dict[UUID, UserPublicOut]:
    """Resolve many user ids to public profiles in a single query.

    Ids with no matching user are absent from the result.
    """
    ids = set(user_ids)
    if not ids:
        return {}
    users = db.scalars(select(User).where(User.id.in_(ids))).all()
    return {u.id: UserPublicOut.model_validate(u) for u in users}


# =============================================================================
# Service Functions
# =============================================================================


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """Create a user account.

    The password is hashed here, explicitly, before the row is built.

    Raises:
        InvalidRequestError: If the password length is out of bounds.
        ConflictError(E_USER_EXISTS): If the username or email is taken.
    """
    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST,
            f"Password must be {MIN_PASSWORD_LENGTH}-{MAX_PASSWORD_LENGTH} characters",
        )

    username = username.strip()
    email = normalize_email(email)

    taken = db.scalar(
        select(User.id).where(or_(User.username == username, User.email == email))
    )
    if taken is not None:
        raise ConflictError(ApiErrorCode.E_USER_EXISTS, "Username or email already registered")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
    )

    try:
        with transaction(db):
            db.add(user)
            db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            ApiErrorCode.E_USER_EXISTS, "Username or email already registered"
        ) from exc

    logger.info("user_registered", new_user_id=str(user.id))
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Check credentials and stamp last_login_at.

    Unknown email and wrong password fail identically.

    Raises:
        ApiError(E_INVALID_CREDENTIALS): On any credential mismatch.
    """
    user = db.scalar(select(User).where(User.email == normalize_email(email)))
    if user is None or not verify_password(user.password_hash, password):
        logger.info("login_failed")
        raise ApiError(ApiErrorCode.E_INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE)

    with transaction(db):
        user.last_login_at = utcnow()

    logger.info("login_succeeded", login_user_id=str(user.id))
    return user


def get_user(db: Session, user_id: UUID) -> UserPublicOut:
    return UserPublicOut.model_validate(get_user_or_404(db, user_id))


def get_me(db: Session, viewer_id: UUID) -> UserPrivateOut:
    return UserPrivateOut.model_validate(get_user_or_404(db, viewer_id))


def update_profile(db: Session, viewer_id: UUID, req: UpdateProfileRequest) -> UserPrivateOut:
    """Apply a partial profile update.

    Only fields explicitly present in the request body are written; sending
    null clears a nullable field. is_private cannot be cleared.
    """
    user = get_user_or_404(db, viewer_id)
    changes = req.model_dump(exclude_unset=True)

    if "is_private" in changes and changes["is_private"] is None:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "is_private cannot be null")

    with transaction(db):
        for field, value in changes.items():
            setattr(user, field, value)

    if changes:
        logger.info("profile_updated", fields=sorted(changes))
    return UserPrivateOut.model_validate(user)
