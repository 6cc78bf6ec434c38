"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, auth middleware, request-id middleware, and routes.

Token Verification:
- Session tokens are HS256 JWTs minted by huddle.auth.tokens at register/login
- SessionTokenVerifier checks them with the same signing key, issuer and audience
- Tests may inject any TokenVerifier implementation

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- This ensures all requests (including auth failures) get X-Request-ID

Actual execution order per request:
1. RequestIDMiddleware (sets request_id, starts timer)
2. AuthMiddleware (verifies auth, sets viewer)
3. Route handler
4. AuthMiddleware (returns response)
5. RequestIDMiddleware (logs, sets response header)
"""

import json

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from huddle import __version__
from huddle.api.routes import create_api_router
from huddle.auth.middleware import AuthMiddleware
from huddle.auth.tokens import get_signing_key_bytes
from huddle.auth.verifier import SessionTokenVerifier, TokenVerifier
from huddle.config import get_settings
from huddle.errors import ApiError, ApiErrorCode
from huddle.logging import configure_logging, get_logger
from huddle.middleware.request_id import RequestIDMiddleware
from huddle.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)

# Configure structured logging at import time
configure_logging()

logger = get_logger(__name__)


def create_token_verifier() -> SessionTokenVerifier:
    """Create the session token verifier from settings."""
    settings = get_settings()

    return SessionTokenVerifier(
        signing_key=get_signing_key_bytes(settings),
        issuer=settings.session_token_issuer,
        audience=settings.session_token_audience,
    )


def create_app(
    skip_auth_middleware: bool = False,
    token_verifier: TokenVerifier | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        skip_auth_middleware: If True, skip adding auth middleware (for testing).
        token_verifier: Optional custom token verifier (for testing).

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    if not settings.log_json:
        configure_logging(json_format=False)

    app = FastAPI(
        title="Huddle API",
        description="Backend API for Huddle - friends, posts and direct messages",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (bad fields, path ids, query values)."""
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()))
            message = f"Invalid request: {location} - {errors[0].get('msg', 'invalid')}"
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, message),
        )

    # Handle JSON decode errors from malformed JSON bodies
    @app.middleware("http")
    async def catch_json_decode_errors(request: Request, call_next):
        """Catch JSON decode errors before they reach route handlers."""
        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type", "")
            if "application/json" in content_type:
                body = await request.body()
                if body:
                    try:
                        json.loads(body)
                    except json.JSONDecodeError:
                        return JSONResponse(
                            status_code=400,
                            content=error_response(
                                ApiErrorCode.E_INVALID_REQUEST, "Malformed JSON body"
                            ),
                        )
        return await call_next(request)

    app.include_router(create_api_router())

    # Add auth middleware (runs on all requests except public paths)
    if not skip_auth_middleware:
        verifier = token_verifier or create_token_verifier()
        app.add_middleware(AuthMiddleware, verifier=verifier)
        logger.info("auth_middleware_enabled", env=settings.huddle_env.value)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.
    This ensures every response includes X-Request-ID, including auth failures.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log access entries for each request.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
