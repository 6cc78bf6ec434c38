"""Token verification implementations.

Provides:
- TokenVerifier: Protocol for token verification
- SessionTokenVerifier: Verifier for HS256 session tokens minted by huddle.auth.tokens
"""

import logging
from typing import Any, Protocol
from uuid import UUID

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidAudienceError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
)

from huddle.auth.tokens import SESSION_TOKEN_ALGORITHM
from huddle.errors import ApiError, ApiErrorCode

logger = logging.getLogger(__name__)

# Clock skew allowance in seconds
CLOCK_SKEW_SECONDS = 60


class TokenVerifier(Protocol):
    """Protocol for token verification.

    Implementations must verify JWT tokens and return decoded claims.
    """

    def verify(self, token: str) -> dict[str, Any]:
        """Verify token and return decoded claims.

        Args:
            token: The JWT token string to verify.

        Returns:
            Decoded JWT claims dictionary.

        Raises:
            ApiError(E_UNAUTHENTICATED): Token is invalid, expired, or malformed.
        """
        ...


class SessionTokenVerifier:
    """Verifier for Huddle session tokens.

    Validates:
    - HS256 signature with the configured signing key
    - exp with +/-60s clock skew
    - iss and aud match configuration
    - sub must be valid UUID
    """

    def __init__(self, signing_key: bytes, issuer: str, audience: str):
        """Initialize the session token verifier.

        Args:
            signing_key: Raw HS256 key bytes.
            issuer: Expected `iss` claim.
            audience: Expected `aud` claim.
        """
        self.signing_key = signing_key
        self.issuer = issuer
        self.audience = audience

    def verify(self, token: str) -> dict[str, Any]:
        """Verify a session token.

        Args:
            token: The JWT token string.

        Returns:
            Decoded claims dictionary.

        Raises:
            ApiError(E_UNAUTHENTICATED): Token is invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self.signing_key,
                algorithms=[SESSION_TOKEN_ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                leeway=CLOCK_SKEW_SECONDS,
                options={
                    "require": ["exp", "iss", "sub"],
                    "verify_aud": True,
                },
            )
        except ExpiredSignatureError as e:
            logger.warning("auth_failure", extra={"reason": "expired_token"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Token expired") from e
        except InvalidSignatureError as e:
            logger.warning("auth_failure", extra={"reason": "invalid_signature"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token signature") from e
        except InvalidIssuerError as e:
            logger.warning("auth_failure", extra={"reason": "invalid_issuer"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token issuer") from e
        except InvalidAudienceError as e:
            logger.warning("auth_failure", extra={"reason": "invalid_audience"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token audience") from e
        except DecodeError as e:
            logger.warning("auth_failure", extra={"reason": "decode_error", "error": str(e)})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token format") from e
        except InvalidTokenError as e:
            logger.warning("auth_failure", extra={"reason": "invalid_token", "error": str(e)})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token") from e

        sub = payload.get("sub")
        if not sub:
            logger.warning("auth_failure", extra={"reason": "missing_sub"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token: missing sub")

        try:
            UUID(sub)
        except (ValueError, TypeError) as e:
            logger.warning("auth_failure", extra={"reason": "invalid_sub"})
            raise ApiError(
                ApiErrorCode.E_UNAUTHENTICATED, "Invalid token: sub is not a valid UUID"
            ) from e

        return payload
