"""
Error types and error response formatting for the Polymarket gateway.

Every error the upstream client raises derives from ApiError and carries the
HTTP status code the gateway should answer with. The cache layer passes these
through untouched; only a 404 from a single-entity lookup is turned into None.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


class ApiError(Exception):
    """Base class for all API-related errors."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: str,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.error_type,
            "message": self.message,
            "statusCode": self.status_code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class NetworkError(ApiError):
    """Unexpected transport failure talking to the upstream API."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message, 503, "NETWORK_ERROR", details)


class UpstreamTimeoutError(ApiError):
    def __init__(self, message: str = "Request timeout", details: Any | None = None) -> None:
        super().__init__(message, 503, "TIMEOUT_ERROR", details)


class UpstreamConnectionError(ApiError):
    """Connection refused, DNS failure and friends."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message, 503, "CONNECTION_ERROR", details)


class ApiResponseError(ApiError):
    """
    Upstream answered with a 4xx/5xx status.

    status_code is what the gateway returns to its own callers (upstream 5xx
    become 503), response_status is what the upstream actually sent.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        response_status: int,
        response_body: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code,
            "API_RESPONSE_ERROR",
            {"responseStatus": response_status, "responseBody": response_body},
        )
        self.response_status = response_status
        self.response_body = response_body


class ValidationError(ApiError):
    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class ParsingError(ApiError):
    """Upstream returned a body that is not valid JSON."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message, 502, "PARSING_ERROR", details)


class NotFoundError(ApiError):
    """Raised by route handlers when a lookup resolved to None."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message, 404, "NOT_FOUND", details)


class ConfigurationError(Exception):
    """Invalid configuration detected at startup."""


def format_error_response(error: BaseException) -> dict[str, Any]:
    """
    Format any exception into the gateway's JSON error body.

    Non-ApiError exceptions are reported as a generic 500 so internal details
    never leak beyond the message.
    """
    if isinstance(error, ApiError):
        return error.to_dict()

    return {
        "error": "INTERNAL_ERROR",
        "message": str(error) or "An unexpected error occurred",
        "statusCode": 500,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def is_not_found(error: BaseException) -> bool:
    """True when the error carries a numeric 404 status code."""
    return getattr(error, "status_code", None) == 404


__all__ = [
    "ApiError",
    "ApiResponseError",
    "ConfigurationError",
    "NetworkError",
    "NotFoundError",
    "ParsingError",
    "UpstreamConnectionError",
    "UpstreamTimeoutError",
    "ValidationError",
    "format_error_response",
    "is_not_found",
]
