"""Session tokens - mint short-lived HS256 JWTs after register/login.

Claims: iss, aud, sub=user_id, iat, exp=now+ttl, jti=uuid.
The signing key comes from SESSION_TOKEN_SIGNING_KEY (dev key in local/test).
Verification lives in huddle.auth.verifier.SessionTokenVerifier.
"""

import base64
import time
from datetime import UTC, datetime
from uuid import UUID, uuid4

import jwt

from huddle.config import Settings, get_settings

SESSION_TOKEN_ALGORITHM = "HS256"


def get_signing_key_bytes(settings: Settings | None = None) -> bytes:
    """Decode the base64-encoded signing key to raw bytes.

    Length and encoding are validated when settings load.
    """
    settings = settings or get_settings()
    return base64.b64decode(settings.effective_session_token_signing_key)


def mint_session_token(user_id: UUID, settings: Settings | None = None) -> dict:
    """Mint a session token for an authenticated user.

    Args:
        user_id: The user's ID (becomes the `sub` claim).
        settings: Optional settings override (defaults to cached settings).

    Returns:
        Dict with token and expires_at (ISO8601).
    """
    settings = settings or get_settings()
    now = int(time.time())
    exp = now + settings.session_token_ttl_seconds

    payload = {
        "iss": settings.session_token_issuer,
        "aud": settings.session_token_audience,
        "sub": str(user_id),
        "iat": now,
        "exp": exp,
        "jti": str(uuid4()),
    }

    token = jwt.encode(payload, get_signing_key_bytes(settings), algorithm=SESSION_TOKEN_ALGORITHM)

    return {
        "token": token,
        "expires_at": datetime.fromtimestamp(exp, tz=UTC).isoformat(),
    }
