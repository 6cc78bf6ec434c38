"""Test helpers for authentication and common test operations.

Provides:
- Session token minting for test authentication
- Header generation for test requests
"""

import time
from uuid import UUID, uuid4

import jwt

from huddle.auth.tokens import SESSION_TOKEN_ALGORITHM, get_signing_key_bytes, mint_session_token
from huddle.config import get_settings


def auth_headers(user_id: UUID | str, **extra_headers) -> dict[str, str]:
    """Authorization headers carrying a valid session token for user_id."""
    token = mint_session_token(UUID(str(user_id)))["token"]
    return {"Authorization": f"Bearer {token}", **extra_headers}


def mint_expired_token(user_id: UUID | str) -> str:
    """Mint a correctly signed session token that expired 1 hour ago."""
    settings = get_settings()
    now = int(time.time())
    payload = {
        "iss": settings.session_token_issuer,
        "aud": settings.session_token_audience,
        "sub": str(user_id),
        "iat": now - 7200,
        "exp": now - 3600,
        "jti": str(uuid4()),
    }
    return jwt.encode(payload, get_signing_key_bytes(settings), algorithm=SESSION_TOKEN_ALGORITHM)


def mint_token_with_bad_signature(user_id: UUID | str) -> str:
    """Mint an otherwise valid session token signed with the wrong key."""
    settings = get_settings()
    now = int(time.time())
    payload = {
        "iss": settings.session_token_issuer,
        "aud": settings.session_token_audience,
        "sub": str(user_id),
        "iat": now,
        "exp": now + 3600,
    }
    return jwt.encode(payload, b"x" * 32, algorithm=SESSION_TOKEN_ALGORITHM)


def error_code(response) -> str:
    """Pull the error code out of an error envelope."""
    return response.json()["error"]["code"]
