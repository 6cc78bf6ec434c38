"""Middleware modules for Huddle API."""

from huddle.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware

__all__ = ["RequestIDMiddleware", "REQUEST_ID_HEADER"]
