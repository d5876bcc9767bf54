"""
Vendor error translation and the retry helper.
"""

import pytest
from fastapi import HTTPException
from postgrest.exceptions import APIError

from cando.core.errors import (
    MessageError, fallback_on_error, handle_message_error, handle_supabase_error,
    http_error_from_message_error, http_error_from_supabase, with_retry
)


def api_error(code: str, message: str = "boom") -> APIError:
    return APIError({"code": code, "message": message, "details": None, "hint": None})


class TestSupabaseErrors:
    def test_known_code_gets_friendly_message(self):
        wrapped = handle_supabase_error(api_error("23505", "duplicate key value"))
        assert wrapped.code == "23505"
        assert wrapped.message == "This record already exists."

    def test_unknown_code_keeps_vendor_message(self):
        wrapped = handle_supabase_error(api_error("XX000", "disk on fire"))
        assert wrapped.message == "disk on fire"

    @pytest.mark.parametrize("code,status", [
        ("23505", 409),
        ("23503", 409),
        ("42P01", 404),
        ("42501", 403),
        ("PGRST116", 404),
        ("23514", 422),
    ])
    def test_status_mapping(self, code, status):
        assert http_error_from_supabase(api_error(code)).status_code == status

    def test_unmapped_code_uses_default_detail(self):
        error = http_error_from_supabase(api_error("XX000"), "Failed to load feed")
        assert error.status_code == 500
        assert error.detail == "Failed to load feed"

    def test_http_exception_passes_through(self):
        original = HTTPException(status_code=409, detail="nope")
        assert http_error_from_supabase(original) is original


class TestMessageErrors:
    def test_check_violation_is_invalid_content(self):
        error = handle_message_error(api_error("23514"))
        assert error.code == "INVALID_CONTENT"
        assert error.retryable is False

    def test_database_rate_limit_is_retryable(self):
        error = handle_message_error(api_error("P0001", "Rate limit exceeded"))
        assert error.code == "RATE_LIMIT"
        assert error.retryable is True

    def test_network_failure_is_retryable(self):
        error = handle_message_error(Exception("Connection reset by peer"))
        assert error.code == "NETWORK_ERROR"
        assert error.retryable is True

    def test_unknown(self):
        assert handle_message_error(Exception("weird")).code == "UNKNOWN"

    def test_http_mapping(self):
        error = http_error_from_message_error(MessageError("denied", "PERMISSION_DENIED"))
        assert error.status_code == 403
        assert error.detail == {"message": "denied", "code": "PERMISSION_DENIED", "retryable": False}


class TestWithRetry:
    def test_succeeds_after_failures_with_backoff(self):
        sleeps = []
        attempts = []

        def operation():
            attempts.append(1)
            if len(attempts) < 3:
                raise Exception("timeout")
            return "ok"

        assert with_retry(operation, retries=3, delay=1.0, sleep=sleeps.append) == "ok"
        assert sleeps == [1.0, 2.0]

    def test_raises_last_error_when_exhausted(self):
        errors = []

        def operation():
            raise ValueError(f"attempt {len(errors) + 1}")

        with pytest.raises(ValueError, match="attempt 3"):
            with_retry(
                operation,
                retries=3,
                on_error=lambda e, attempt: errors.append(attempt),
                sleep=lambda _: None
            )
        assert errors == [1, 2, 3]

    def test_stops_on_non_retryable(self):
        sleeps = []
        calls = []

        def operation():
            calls.append(1)
            raise ValueError("bad input")

        with pytest.raises(ValueError):
            with_retry(operation, retries=5, should_retry=lambda e: False, sleep=sleeps.append)
        assert len(calls) == 1
        assert sleeps == []


def test_fallback_on_error():
    def operation():
        raise RuntimeError("down")

    assert fallback_on_error(operation, []) == []
