"""
Error taxonomy and classification

Every failure that leaves a storage call, the AI service or the HTTP client is
turned into an AppError tagged with one ErrorKind. Classification happens once;
an AppError is never re-classified.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import httpx
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "Validation Error"
    AUTHENTICATION = "Unauthorized"
    AUTHORIZATION = "Forbidden"
    NOT_FOUND = "Not Found"
    DATABASE = "Database Error"
    NETWORK = "Network Error"
    TIMEOUT = "Timeout Error"
    AI_SERVICE = "AI Service Error"
    CONFIGURATION = "Configuration Error"
    INTERNAL = "Internal Server Error"


# Default (status_code, retryable) per kind
KIND_DEFAULTS: Dict[ErrorKind, Tuple[int, bool]] = {
    ErrorKind.VALIDATION: (400, False),
    ErrorKind.AUTHENTICATION: (401, False),
    ErrorKind.AUTHORIZATION: (403, False),
    ErrorKind.NOT_FOUND: (404, False),
    ErrorKind.DATABASE: (500, False),
    ErrorKind.NETWORK: (503, True),
    ErrorKind.TIMEOUT: (504, True),
    ErrorKind.AI_SERVICE: (500, True),
    ErrorKind.CONFIGURATION: (503, False),
    ErrorKind.INTERNAL: (500, False),
}


class AppError(Exception):
    """A classified failure: kind, user-facing message, status code and retryable flag."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        retryable: Optional[bool] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        default_status, default_retryable = KIND_DEFAULTS[kind]
        self.kind = kind
        self.message = message
        self.status_code = default_status if status_code is None else status_code
        self.retryable = default_retryable if retryable is None else retryable
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "error": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            data["errors"] = self.details
        return data

    def __repr__(self) -> str:
        return (
            f"AppError(kind={self.kind.name}, message={self.message!r}, "
            f"status_code={self.status_code}, retryable={self.retryable})"
        )


# Known database error codes -> (kind, message, status, retryable).
# PostgREST/Postgres codes come first, followed by their DynamoDB equivalents.
DATABASE_ERROR_CODES: Dict[str, Tuple[ErrorKind, str, int, bool]] = {
    "PGRST116": (ErrorKind.NOT_FOUND, "Resource not found", 404, False),
    "23505": (ErrorKind.VALIDATION, "A record with this value already exists", 400, False),
    "23503": (ErrorKind.VALIDATION, "Referenced record does not exist", 400, False),
    "23502": (ErrorKind.VALIDATION, "Required field is missing", 400, False),
    "PGRST301": (ErrorKind.AUTHENTICATION, "Session expired. Please log in again.", 401, False),
    "ResourceNotFoundException": (ErrorKind.NOT_FOUND, "Resource not found", 404, False),
    "ConditionalCheckFailedException": (
        ErrorKind.VALIDATION, "A record with this value already exists", 400, False
    ),
    "ValidationException": (ErrorKind.VALIDATION, "Required field is missing", 400, False),
    "ExpiredTokenException": (
        ErrorKind.AUTHENTICATION, "Session expired. Please log in again.", 401, False
    ),
}

NETWORK_KEYWORDS = ("network", "fetch", "connection", "timeout")
RETRYABLE_STATUS_CODES = (408, 429, 504)


def _code_and_message(error: Any, default_message: str) -> Tuple[Optional[str], str]:
    if isinstance(error, ClientError):
        info = error.response.get("Error", {})
        return info.get("Code"), info.get("Message") or default_message
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message") or default_message
    else:
        code = getattr(error, "code", None)
        message = getattr(error, "message", None) or str(error) or default_message
    return (str(code) if code is not None else None), message


def classify_database_error(error: Any) -> AppError:
    """Map a storage failure onto the error taxonomy."""
    if isinstance(error, AppError):
        return error

    code, message = _code_and_message(error, "Database operation failed")
    known = DATABASE_ERROR_CODES.get(code) if code else None
    if known:
        kind, friendly, status_code, retryable = known
        return AppError(kind, friendly, status_code, retryable)

    if "connection" in message or "timeout" in message:
        return AppError(ErrorKind.DATABASE, "Database connection error. Please try again.", 503, True)

    return AppError(ErrorKind.DATABASE, message, 500, False)


def classify_ai_error(error: Any) -> AppError:
    """Map a generative-AI failure onto the error taxonomy, matching on the message text."""
    if isinstance(error, AppError):
        return error

    _, message = _code_and_message(error, "AI service error")

    if "API key" in message:
        return AppError(ErrorKind.CONFIGURATION, "AI service is not properly configured", 503, False)
    if "timeout" in message or "Request timeout" in message:
        return AppError(
            ErrorKind.TIMEOUT, "AI service took too long to respond. Please try again.", 504, True
        )
    if "rate limit" in message or "quota" in message:
        return AppError(
            ErrorKind.AI_SERVICE, "AI service rate limit reached. Please try again later.", 429, True
        )
    if "network" in message or "fetch" in message:
        return AppError(ErrorKind.NETWORK, "Network error connecting to AI service", 503, True)

    return AppError(
        ErrorKind.AI_SERVICE, "Failed to generate insights. Please try again later.", 500, True
    )


def _status_code_of(error: Any) -> Optional[int]:
    if isinstance(error, dict):
        status_code = error.get("status_code", error.get("statusCode", error.get("status")))
    else:
        status_code = getattr(error, "status_code", None) or getattr(error, "status", None)
        response = getattr(error, "response", None)
        if status_code is None and isinstance(response, httpx.Response):
            status_code = response.status_code
    return status_code if isinstance(status_code, int) else None


def is_network_error(error: Any) -> bool:
    if isinstance(error, (httpx.TransportError, ConnectionError, TimeoutError)):
        return True
    if isinstance(error, Exception):
        message = str(error).lower()
        return any(keyword in message for keyword in NETWORK_KEYWORDS)
    return False


def is_retryable_error(error: Any) -> bool:
    """Decide whether a failure is transient and worth another attempt."""
    if isinstance(error, AppError):
        return error.retryable

    if is_network_error(error):
        return True

    status_code = _status_code_of(error)
    if status_code is None:
        return False
    return status_code >= 500 or status_code in RETRYABLE_STATUS_CODES


def parse_error(error: Any) -> Tuple[str, bool]:
    """Return (message, retryable) suitable for showing to a user."""
    if isinstance(error, AppError):
        return error.message, error.retryable

    if isinstance(error, Exception):
        return str(error), False

    if isinstance(error, dict) and error.get("message"):
        status_code = _status_code_of(error) or 0
        return error["message"], status_code >= 500 or status_code in (408, 429)

    return "An unexpected error occurred", False
