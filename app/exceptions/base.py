# ruff: noqa: D107
"""Base exception classes."""

from typing import Any

from fastapi import HTTPException


class BaseAppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | str | None = None,
        error_type: str | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.error_type = error_type or error_code

        super().__init__(
            status_code=status_code,
            detail={
                "message": message,
                "error_code": error_code,
                "details": details,
                "type": self.error_type,
            },
        )

    def __str__(self) -> str:
        return self.message


class ValidationError(BaseAppException):
    """Exception raised when request input is malformed."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict[str, Any] | str | None = None,
    ):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class AuthenticationRequired(BaseAppException):
    """Exception raised when an endpoint needs a session and none is present."""

    def __init__(
        self,
        message: str = "Authentication required",
        details: dict[str, Any] | str | None = None,
    ):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTHENTICATION_REQUIRED",
            details=details,
        )


class ForbiddenError(BaseAppException):
    """Exception raised when the caller does not own the requested resource."""

    def __init__(
        self,
        message: str = "You do not have permission to access this resource",
        details: dict[str, Any] | str | None = None,
    ):
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN",
            details=details,
        )


class NotFoundError(BaseAppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: dict[str, Any] | str | None = None,
    ):
        super().__init__(message=message, status_code=404, error_code="NOT_FOUND", details=details)


class StorageError(BaseAppException):
    """Exception raised when the conversation store fails."""

    def __init__(
        self,
        message: str = "A storage error occurred",
        details: dict[str, Any] | str | None = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORAGE_ERROR",
            details=details,
        )
