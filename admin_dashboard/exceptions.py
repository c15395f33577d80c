"""
Error taxonomy for the admin dashboard client
"""

from typing import Any, Optional


class DashboardError(Exception):
    """Base class for every error raised by this package"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(DashboardError):
    """A backend call did not produce a usable response"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[Any] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class TransportError(ApiError):
    """Network unreachable, connection reset or timeout"""


class AuthenticationError(ApiError):
    """Backend rejected the bearer token (HTTP 401)"""


class ServerError(ApiError):
    """Non-2xx response other than 401"""


class ValidationFailure(DashboardError):
    """Client-side validation failed; the request never left the process"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
