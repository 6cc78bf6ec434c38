"""Authentication and authorization module.

This module provides:
- Password hashing (argon2id)
- Session token minting and verification
- Auth middleware for FastAPI
- Request state with viewer identity
"""

from huddle.auth.middleware import AuthMiddleware, Viewer, get_viewer
from huddle.auth.verifier import SessionTokenVerifier, TokenVerifier

__all__ = [
    "AuthMiddleware",
    "Viewer",
    "get_viewer",
    "SessionTokenVerifier",
    "TokenVerifier",
]
