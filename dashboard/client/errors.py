"""
Exceptions raised by the pricing backend client.
"""

from __future__ import annotations


class ApiClientError(Exception):
    """Base exception for backend client failures."""


class ApiTransportError(ApiClientError):
    """Raised when no HTTP response was received (timeout, connection refused)."""

    status_code = None


class ApiRequestError(ApiClientError):
    """
    Raised when the backend answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the backend.
        message: Human-readable message supplied by the backend.
    """

    def __init__(self, status_code: int, message: str, *, method: str = "", path: str = "") -> None:
        self.status_code = status_code
        self.message = message
        self.method = method
        self.path = path
        prefix = f"{method} {path} " if method and path else ""
        super().__init__(f"{prefix}failed with HTTP {status_code}: {message}")

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class ApiAuthenticationError(ApiClientError):
    """Raised when the login exchange fails or yields no access token."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class ApiResponseError(ApiClientError):
    """Raised when a response body is not valid JSON or does not match its schema."""
