"""
Error types shared by the service layer and helpers to translate
PostgREST / Supabase failures into something a client can act on.
"""

import logging
import math
import time
from typing import Any, Callable, Optional, TypeVar

from fastapi import HTTPException
from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Postgres / PostgREST codes we translate
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"
UNDEFINED_TABLE = "42P01"
INSUFFICIENT_PRIVILEGE = "42501"
RAISE_EXCEPTION = "P0001"
NO_ROWS = "PGRST116"

ERROR_MESSAGES = {
    UNIQUE_VIOLATION: "This record already exists.",
    FOREIGN_KEY_VIOLATION: "This operation would break data relationships.",
    UNDEFINED_TABLE: "The requested resource was not found.",
    INSUFFICIENT_PRIVILEGE: "You do not have permission to perform this action.",
}

HTTP_STATUS_BY_CODE = {
    UNIQUE_VIOLATION: 409,
    FOREIGN_KEY_VIOLATION: 409,
    UNDEFINED_TABLE: 404,
    INSUFFICIENT_PRIVILEGE: 403,
    NO_ROWS: 404,
    CHECK_VIOLATION: 422,
}

MESSAGE_ERROR_CODES = {
    "RATE_LIMIT": "RATE_LIMIT",
    "INVALID_CONTENT": "INVALID_CONTENT",
    "PERMISSION_DENIED": "PERMISSION_DENIED",
    "COMPANY_NOT_FOUND": "COMPANY_NOT_FOUND",
    "NETWORK_ERROR": "NETWORK_ERROR",
    "LATE_MODIFICATION": "LATE_MODIFICATION",
}

MESSAGE_ERROR_STATUS = {
    "RATE_LIMIT": 429,
    "INVALID_CONTENT": 422,
    "PERMISSION_DENIED": 403,
    "COMPANY_NOT_FOUND": 404,
    "NETWORK_ERROR": 503,
    "LATE_MODIFICATION": 409,
}


class SupabaseError(Exception):
    def __init__(self, message: str, original_error: Any = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.code = code


class RateLimitError(Exception):
    """Raised when an in-process throttle rejects a request. reset_time is in limiter milliseconds."""

    def __init__(self, message: str = "Too many requests", reset_time: Optional[float] = None,
                 retry_after: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.reset_time = reset_time
        self.retry_after = retry_after


class MessageError(Exception):
    def __init__(self, message: str, code: str, retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable


def _error_code(error: Any) -> Optional[str]:
    code = getattr(error, "code", None)
    return str(code) if code else None


def _error_text(error: Any) -> str:
    return getattr(error, "message", None) or str(error)


def get_error_message(code: Optional[str], message: Optional[str] = None) -> str:
    if code in ERROR_MESSAGES:
        return ERROR_MESSAGES[code]
    return message or "An unexpected error occurred."


def handle_supabase_error(error: Any) -> SupabaseError:
    """Log a vendor error and wrap it with a user-facing message. Callers raise the result."""
    logger.error("Supabase error: %s", error)
    code = _error_code(error)
    return SupabaseError(get_error_message(code, _error_text(error)), error, code)


def http_error_from_supabase(error: Exception, default_detail: Optional[str] = None) -> HTTPException:
    """Map a PostgREST APIError (or any other failure) to the HTTPException a route should raise."""
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, APIError):
        wrapped = handle_supabase_error(error)
        status_code = HTTP_STATUS_BY_CODE.get(wrapped.code, 500)
        detail = wrapped.message
        if status_code == 500 and default_detail:
            detail = default_detail
        return HTTPException(status_code=status_code, detail=detail)
    logger.error("Unexpected backend error: %s", error)
    return HTTPException(status_code=500, detail=default_detail or str(error))


def is_network_error(error: Any) -> bool:
    text = _error_text(error).lower()
    return "network" in text or "connection" in text or "timeout" in text


def handle_message_error(error: Any) -> MessageError:
    if isinstance(error, MessageError):
        return error
    code = _error_code(error)
    text = _error_text(error)

    if code == CHECK_VIOLATION:
        return MessageError(
            "Message content is invalid. Please check length and content.",
            MESSAGE_ERROR_CODES["INVALID_CONTENT"]
        )
    if code == INSUFFICIENT_PRIVILEGE:
        return MessageError(
            "You do not have permission to send this message.",
            MESSAGE_ERROR_CODES["PERMISSION_DENIED"]
        )
    if code == RAISE_EXCEPTION and "rate limit" in text.lower():
        return MessageError(
            "You are sending messages too quickly. Please wait a moment.",
            MESSAGE_ERROR_CODES["RATE_LIMIT"],
            retryable=True
        )
    if is_network_error(error):
        return MessageError(
            "Network error. Please check your connection.",
            MESSAGE_ERROR_CODES["NETWORK_ERROR"],
            retryable=True
        )
    return MessageError("An unexpected error occurred while processing your message", "UNKNOWN")


def http_error_from_message_error(error: MessageError) -> HTTPException:
    return HTTPException(
        status_code=MESSAGE_ERROR_STATUS.get(error.code, 500),
        detail={"message": error.message, "code": error.code, "retryable": error.retryable}
    )


def with_retry(
    operation: Callable[[], T],
    retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    on_error: Optional[Callable[[Exception, int], None]] = None,
    should_retry: Optional[Callable[[Exception], bool]] = None,
    sleep: Callable[[float], None] = time.sleep
) -> T:
    """Call operation up to `retries` times, sleeping delay * backoff**n between attempts."""
    last_error: Optional[Exception] = None
    for attempt in range(1, retries + 1):
        try:
            return operation()
        except Exception as e:
            last_error = e
            if on_error:
                on_error(e, attempt)
            if attempt == retries or (should_retry and not should_retry(e)):
                break
            wait = delay * math.pow(backoff, attempt - 1)
            logger.warning("Attempt %s/%s failed (%s), retrying in %.2fs", attempt, retries, e, wait)
            sleep(wait)
    raise last_error


def fallback_on_error(operation: Callable[[], T], fallback: T) -> T:
    try:
        return operation()
    except Exception as e:
        logger.error("Operation failed, using fallback: %s", e)
        return fallback
