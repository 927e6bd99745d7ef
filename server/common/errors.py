"""Error taxonomy shared by every callable operation.

Business logic raises these exceptions. The call surface converts them
into structured error bodies, so a raw backend exception never crosses
the request/response boundary.
"""

from typing import ClassVar


class CallError(Exception):
    """Base class for errors reported to callers."""

    status: ClassVar[str] = 'INTERNAL'
    http_status: ClassVar[int] = 500

    def __init__(self, message: str) -> None:
        """Initialize CallError.

        Args:
            message: Human readable message returned to the caller.
        """
        self.message = message
        super().__init__(message)


class UnauthenticatedError(CallError):
    """Raised when the caller token is missing, invalid or expired."""

    status = 'UNAUTHENTICATED'
    http_status = 401


class PermissionDeniedError(CallError):
    """Raised when the caller lacks a required claim or ownership."""

    status = 'PERMISSION_DENIED'
    http_status = 403


class InvalidArgumentError(CallError):
    """Raised when a required request field is missing or malformed."""

    status = 'INVALID_ARGUMENT'
    http_status = 400


class NotFoundError(CallError):
    """Raised when a source object or account does not exist."""

    status = 'NOT_FOUND'
    http_status = 404


class UpstreamFetchError(NotFoundError):
    """Raised when a source URL is unreachable or answers non-success."""


class InternalError(CallError):
    """Raised on unexpected storage or backend failure."""
