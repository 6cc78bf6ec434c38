"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
Duplicate relationships and self-targeted actions are client errors (400),
not 409, to stay compatible with existing clients.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Authentication errors (401)
    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"
    E_INVALID_CREDENTIALS = "E_INVALID_CREDENTIALS"

    # Authorization errors (403)
    E_FORBIDDEN = "E_FORBIDDEN"
    E_NOT_OWNER = "E_NOT_OWNER"

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"
    E_USER_NOT_FOUND = "E_USER_NOT_FOUND"
    E_RELATIONSHIP_NOT_FOUND = "E_RELATIONSHIP_NOT_FOUND"
    E_POST_NOT_FOUND = "E_POST_NOT_FOUND"
    E_COMMENT_NOT_FOUND = "E_COMMENT_NOT_FOUND"
    E_MESSAGE_NOT_FOUND = "E_MESSAGE_NOT_FOUND"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_SELF_TARGET = "E_SELF_TARGET"

    # Conflict errors (400)
    E_RELATIONSHIP_EXISTS = "E_RELATIONSHIP_EXISTS"
    E_USER_EXISTS = "E_USER_EXISTS"

    # Server errors
    E_INTERNAL = "E_INTERNAL"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_INVALID_CREDENTIALS: 401,
    ApiErrorCode.E_FORBIDDEN: 403,
    ApiErrorCode.E_NOT_OWNER: 403,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_USER_NOT_FOUND: 404,
    ApiErrorCode.E_RELATIONSHIP_NOT_FOUND: 404,
    ApiErrorCode.E_POST_NOT_FOUND: 404,
    ApiErrorCode.E_COMMENT_NOT_FOUND: 404,
    ApiErrorCode.E_MESSAGE_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_SELF_TARGET: 400,
    ApiErrorCode.E_RELATIONSHIP_EXISTS: 400,
    ApiErrorCode.E_USER_EXISTS: 400,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
    """

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class NotFoundError(ApiError):
    """Resource not found error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class ForbiddenError(ApiError):
    """Authorization failure error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_FORBIDDEN, message: str = "Forbidden"):
        super().__init__(code, message)


class ConflictError(ApiError):
    """Resource already exists error."""

    def __init__(self, code: ApiErrorCode, message: str = "Already exists"):
        super().__init__(code, message)


class InvalidRequestError(ApiError):
    """Invalid request error."""

    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST, message: str = "Invalid request"
    ):
        super().__init__(code, message)
