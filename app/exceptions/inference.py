# ruff: noqa: D107
"""Inference provider exceptions."""

from typing import Any

from .base import BaseAppException


class InferenceProviderError(BaseAppException):
    """Base exception for failures of the upstream model API.

    ``upstream_type`` and ``upstream_status`` carry what the provider reported so
    callers can diagnose the failure without seeing a stack trace.
    """

    def __init__(
        self,
        message: str = "An error occurred while processing your request",
        upstream_message: str | None = None,
        upstream_type: str | None = None,
        upstream_status: int | None = None,
        error_code: str = "INFERENCE_PROVIDER_ERROR",
    ):
        self.upstream_message = upstream_message
        self.upstream_type = upstream_type
        self.upstream_status = upstream_status
        super().__init__(
            message=message,
            status_code=500,
            error_code=error_code,
            details=upstream_message,
            error_type=upstream_type,
        )


class InferenceConfigurationError(InferenceProviderError):
    """Exception raised when the provider is not configured, e.g. a missing key."""

    def __init__(self, message: str = "Inference provider is not configured"):
        super().__init__(
            message=message,
            upstream_message=message,
            upstream_type="configuration_error",
            error_code="CONFIGURATION_ERROR",
        )


class InferenceTimeoutError(InferenceProviderError):
    """Exception raised when the upstream call times out."""

    def __init__(self, upstream_message: str | None = None):
        super().__init__(
            upstream_message=upstream_message or "Inference request timed out",
            upstream_type="timeout",
            error_code="INFERENCE_TIMEOUT",
        )


class InferenceRateLimitError(InferenceProviderError):
    """Exception raised when the upstream rate limit or quota is hit."""

    def __init__(
        self,
        upstream_message: str | None = None,
        upstream_type: str | None = None,
        upstream_status: int | None = 429,
    ):
        super().__init__(
            upstream_message=upstream_message or "Inference rate limit exceeded",
            upstream_type=upstream_type or "rate_limit_exceeded",
            upstream_status=upstream_status,
            error_code="INFERENCE_RATE_LIMITED",
        )


# Map common upstream error types to exceptions
INFERENCE_ERROR_MAPPING: dict[str, type[InferenceProviderError]] = {
    "rate_limit_exceeded": InferenceRateLimitError,
    "insufficient_quota": InferenceRateLimitError,
    "timeout": InferenceTimeoutError,
}


def map_inference_error(
    error_type: str | None,
    message: str,
    status: int | None = None,
) -> InferenceProviderError:
    """Map an upstream error type to the matching exception."""
    exception_class = INFERENCE_ERROR_MAPPING.get(error_type or "")
    if exception_class is InferenceRateLimitError:
        return InferenceRateLimitError(message, error_type, status)
    if exception_class is InferenceTimeoutError:
        return InferenceTimeoutError(message)
    return InferenceProviderError(
        upstream_message=message,
        upstream_type=error_type,
        upstream_status=status,
    )


def error_details(exc: InferenceProviderError) -> dict[str, Any]:
    """Diagnostic view of an upstream failure."""
    return {
        "error": exc.upstream_message,
        "type": exc.upstream_type,
        "statusCode": exc.upstream_status,
    }
