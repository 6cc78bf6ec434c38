"""API route definitions.

Uses a factory pattern to avoid import-time settings loading.
This allows tests to import modules without requiring all environment
variables to be configured upfront.
"""

from fastapi import APIRouter

from huddle.api.routes.auth import router as auth_router
from huddle.api.routes.comments import router as comments_router
from huddle.api.routes.health import router as health_router
from huddle.api.routes.me import router as me_router
from huddle.api.routes.messages import router as messages_router
from huddle.api.routes.posts import router as posts_router
from huddle.api.routes.relationships import router as relationships_router
from huddle.api.routes.users import router as users_router


def create_api_router() -> APIRouter:
    """Create and configure the API router.

    Returns:
        Configured APIRouter with all routes registered.
    """
    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(auth_router, tags=["auth"])
    api_router.include_router(me_router, tags=["user"])
    api_router.include_router(users_router, tags=["user"])
    api_router.include_router(relationships_router, tags=["relationships"])
    api_router.include_router(messages_router, tags=["messages"])
    api_router.include_router(posts_router, tags=["posts"])
    api_router.include_router(comments_router, tags=["comments"])
    return api_router


__all__ = ["create_api_router"]
