"""Unit tests for API error handling.

Tests for custom exception classes and the handlers that convert them into
consistent JSON responses.
"""

import asyncio
import json
from unittest.mock import MagicMock

from fastapi import status
from pydantic import BaseModel, ValidationError

from api.exceptions import (
    SessionNotFoundError,
    generic_exception_handler,
    runtime_error_handler,
    session_not_found_handler,
    validation_exception_handler,
    value_error_handler,
)


def run_async(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def body(response):
    return json.loads(response.body)


class TestSessionNotFoundError:
    """Tests for SessionNotFoundError."""

    def test_attributes(self):
        exc = SessionNotFoundError("abc", ["x", "y"])
        assert exc.session_id == "abc"
        assert exc.available_sessions == ["x", "y"]
        assert str(exc) == "Session 'abc' not found"

    def test_handler(self):
        response = run_async(
            session_not_found_handler(MagicMock(), SessionNotFoundError("abc", ["x"]))
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        data = body(response)
        assert data["requested_session"] == "abc"
        assert data["available_sessions"] == ["x"]


class TestGenericHandlers:
    """Tests for the built-in exception handlers."""

    def test_validation_error(self):
        class Sample(BaseModel):
            value: int

        try:
            Sample(value="not a number")
        except ValidationError as e:
            exc = e

        response = run_async(validation_exception_handler(MagicMock(), exc))
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        data = body(response)
        assert data["error"] == "Validation Error"
        assert data["validation_errors"][0]["loc"] == ["value"]

    def test_value_error(self):
        response = run_async(value_error_handler(MagicMock(), ValueError("bad dt")))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert body(response)["detail"] == "bad dt"

    def test_runtime_error(self):
        response = run_async(runtime_error_handler(MagicMock(), RuntimeError("not ready")))
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert body(response)["type"] == "RuntimeError"

    def test_generic_error_hides_details(self):
        response = run_async(generic_exception_handler(MagicMock(), KeyError("secret")))
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        data = body(response)
        assert data["detail"] == "An unexpected error occurred"
        assert "secret" not in json.dumps(data)
