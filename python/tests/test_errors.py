"""Tests for error handling and response envelopes.

Verifies:
- Error envelope shape is correct
- Every error code maps to correct HTTP status
- Unknown exceptions return E_INTERNAL with 500
- Malformed JSON and invalid bodies return E_INVALID_REQUEST
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from huddle.errors import (
    ERROR_CODE_TO_STATUS,
    ApiError,
    ApiErrorCode,
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from huddle.responses import (
    error_response,
    success_response,
    unhandled_exception_handler,
)


class TestErrorResponse:
    """Tests for error response envelope format."""

    def test_error_response_has_correct_shape(self):
        """Error response contains error object with code and message."""
        response = error_response(ApiErrorCode.E_NOT_FOUND, "Resource not found")

        assert response["error"]["code"] == "E_NOT_FOUND"
        assert response["error"]["message"] == "Resource not found"

    def test_error_response_code_is_string(self):
        """Error code in response is a string, not enum."""
        response = error_response(ApiErrorCode.E_FORBIDDEN, "Access denied")

        assert isinstance(response["error"]["code"], str)

    def test_error_response_includes_explicit_request_id(self):
        """An explicit request id is echoed in the envelope."""
        response = error_response(ApiErrorCode.E_INTERNAL, "Boom", request_id="req-123")

        assert response["error"]["request_id"] == "req-123"


class TestSuccessResponse:
    """Tests for success response envelope format."""

    def test_success_response_has_data_key(self):
        """Success response wraps data in 'data' key."""
        response = success_response({"id": "123", "username": "alice"})

        assert response["data"] == {"id": "123", "username": "alice"}

    def test_success_response_with_list(self):
        """Success response works with list data."""
        items = [{"id": "1"}, {"id": "2"}]

        assert success_response(items)["data"] == items


class TestErrorCodeToStatus:
    """Tests for error code to HTTP status mapping."""

    def test_all_error_codes_have_status_mapping(self):
        """Every ApiErrorCode has a corresponding HTTP status."""
        for code in ApiErrorCode:
            assert code in ERROR_CODE_TO_STATUS, f"Missing status mapping for {code}"

    @pytest.mark.parametrize(
        "code,expected_status",
        [
            (ApiErrorCode.E_UNAUTHENTICATED, 401),
            (ApiErrorCode.E_INVALID_CREDENTIALS, 401),
            (ApiErrorCode.E_FORBIDDEN, 403),
            (ApiErrorCode.E_NOT_OWNER, 403),
            (ApiErrorCode.E_NOT_FOUND, 404),
            (ApiErrorCode.E_USER_NOT_FOUND, 404),
            (ApiErrorCode.E_RELATIONSHIP_NOT_FOUND, 404),
            (ApiErrorCode.E_POST_NOT_FOUND, 404),
            (ApiErrorCode.E_COMMENT_NOT_FOUND, 404),
            (ApiErrorCode.E_MESSAGE_NOT_FOUND, 404),
            (ApiErrorCode.E_INVALID_REQUEST, 400),
            (ApiErrorCode.E_SELF_TARGET, 400),
            # Duplicates are client errors, not 409
            (ApiErrorCode.E_RELATIONSHIP_EXISTS, 400),
            (ApiErrorCode.E_USER_EXISTS, 400),
            (ApiErrorCode.E_INTERNAL, 500),
        ],
    )
    def test_error_code_maps_to_correct_status(self, code: ApiErrorCode, expected_status: int):
        """Each error code maps to the expected HTTP status."""
        assert ERROR_CODE_TO_STATUS[code] == expected_status


class TestApiErrorClass:
    """Tests for ApiError exception classes."""

    def test_api_error_derives_status_code(self):
        """ApiError derives HTTP status from code."""
        error = ApiError(ApiErrorCode.E_FORBIDDEN, "Access denied")

        assert error.code == ApiErrorCode.E_FORBIDDEN
        assert error.message == "Access denied"
        assert error.status_code == 403

    def test_not_found_error_defaults(self):
        """NotFoundError has sensible defaults."""
        error = NotFoundError()

        assert error.code == ApiErrorCode.E_NOT_FOUND
        assert error.status_code == 404

    def test_forbidden_error_defaults(self):
        """ForbiddenError has sensible defaults."""
        assert ForbiddenError().status_code == 403

    def test_invalid_request_error_defaults(self):
        """InvalidRequestError has sensible defaults."""
        error = InvalidRequestError()

        assert error.code == ApiErrorCode.E_INVALID_REQUEST
        assert error.status_code == 400

    def test_conflict_error_is_400(self):
        """ConflictError maps to 400."""
        error = ConflictError(ApiErrorCode.E_RELATIONSHIP_EXISTS)

        assert error.status_code == 400
        assert error.message == "Already exists"


class TestMalformedJsonHandling:
    """Tests for malformed JSON body handling."""

    def test_malformed_json_returns_400(self, client: TestClient):
        """Malformed JSON body returns 400 with E_INVALID_REQUEST."""
        response = client.post(
            "/auth/login",
            content="{invalid json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"

    def test_missing_fields_return_400(self, client: TestClient):
        """Schema validation failures are 400, not 422."""
        response = client.post("/auth/register", json={"username": "alice"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"

    def test_wrong_method_returns_405_envelope(self, client: TestClient):
        """Unsupported methods still get the error envelope."""
        response = client.post("/health")

        assert response.status_code == 405
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"


class TestUnhandledExceptionHandling:
    """Tests for unhandled exception handling."""

    def test_unhandled_exception_returns_500_without_details(self):
        """Unhandled exceptions return 500 E_INTERNAL and do not leak details."""
        test_app = FastAPI()

        @test_app.get("/crash")
        def crash_endpoint():
            raise RuntimeError("SECRET_INTERNAL_DETAIL")

        test_app.add_exception_handler(Exception, unhandled_exception_handler)

        client = TestClient(test_app, raise_server_exceptions=False)
        response = client.get("/crash")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "E_INTERNAL"
        assert "SECRET_INTERNAL_DETAIL" not in response.text
