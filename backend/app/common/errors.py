"""
Error Definitions

Defines gateway exception classes, rendered to clients as Claude-style error bodies.
"""

from typing import Any, Optional


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type and HTTP status.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "api_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Claude error type (e.g. invalid_request_error)
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to Claude error body

        Args:
            include_details: Whether to attach extra details

        Returns:
            dict: {"type": "error", "error": {"type": ..., "message": ...}}
        """
        result: dict[str, Any] = {
            "type": "error",
            "error": {
                "type": self.error_type,
                "message": self.message,
            },
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


class BadRequestError(AppError):
    """
    Bad Request Error

    Raised when the gateway path or request body is malformed.
    """

    def __init__(
        self,
        message: str = "Invalid request",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            details=details,
            status_code=400,
        )


class AuthenticationError(AppError):
    """
    Authentication Error

    Raised when the forwarded upstream credential is missing.
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="authentication_error",
            details=details,
            status_code=401,
        )


class NotFoundError(AppError):
    """
    Resource Not Found Error

    Raised when the requested path is not a messages endpoint.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="not_found_error",
            details=details,
            status_code=404,
        )


class UpstreamError(AppError):
    """
    Upstream Service Error

    Raised when the upstream provider cannot be reached or returns an unreadable body.
    """

    def __init__(
        self,
        message: str = "Upstream service error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 502,
    ):
        super().__init__(
            message=message,
            error_type="api_error",
            details=details,
            status_code=status_code,
        )


class MethodNotAllowedError(AppError):
    """
    Method Not Allowed Error

    Raised when the messages endpoint is called with anything but POST.
    """

    def __init__(
        self,
        message: str = "Method not allowed",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="invalid_request_error",
            details=details,
            status_code=405,
        )
