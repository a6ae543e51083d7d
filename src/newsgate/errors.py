from __future__ import annotations

import math
from enum import StrEnum


class ErrorCode(StrEnum):
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    INVALID_INPUT = "INVALID_INPUT"


class GatewayError(Exception):
    """Raised by the coordinator and route handlers for expected failures.

    Caught by server.py and serialised into the JSON error response.
    Never catch this inside business logic; let it propagate to the
    HTTP layer so the client receives a structured error with a suggestion.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class QuotaExceededError(GatewayError):
    """The bucket's budget for the current window is spent."""

    def __init__(self, bucket: str, seconds_remaining: float) -> None:
        super().__init__(
            code=ErrorCode.QUOTA_EXCEEDED,
            message="Rate limit reached. Please try again later.",
            suggestion=f"Retry after {max(math.ceil(seconds_remaining), 1)} seconds.",
            recoverable=True,
        )
        self.bucket = bucket
        self.seconds_remaining = seconds_remaining

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["error"]["retry_after_seconds"] = self.seconds_remaining
        return body


class UpstreamFailureError(GatewayError):
    """An upstream fetch failed. Never retried by the gateway."""

    def __init__(self, message: str = "Failed to fetch data") -> None:
        super().__init__(
            code=ErrorCode.UPSTREAM_FAILURE,
            message=message,
            suggestion="The news source may be temporarily unavailable.",
            recoverable=True,
        )


class ConfigurationError(Exception):
    """Invalid startup configuration: bad secret key, unknown bucket, bad quota policy.

    Fatal. Raised while wiring GatewayState, before the server accepts traffic.
    """
