"""
Application-wide exception hierarchy.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    ├── NotFoundError - Resource not found
    ├── PermissionDeniedError - Authorization failures
    ├── ConflictError - State conflicts (duplicates, lost races, bad transitions)
    └── ExternalServiceError - Third-party service failures
        └── DownstreamNotificationFailure - Email/notification delivery failed

Every error carries a message, a machine-readable error_code and optional
details, and knows the HTTP status a view should answer with.

Usage:
    from core.exceptions import ValidationError, NotFoundError

    raise ValidationError("provider_id is required", details={"field": "provider_id"})

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.status_code)

Note:
    These are domain errors raised by services. DRF handles API-layer
    exceptions (serialization, authentication) itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (ids, amounts, field errors)
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Provider not found",
                "error_code": "PROVIDER_NOT_FOUND",
                "details": {"provider_id": 12}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input fails validation.

    Missing required fields, unsupported bundle sizes, malformed gateway
    metadata. Nothing has been written when this is raised.
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class NotFoundError(BaseApplicationError):
    """Raised when a single resource expected to exist is missing."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller may not act on a resource.

    For missing or invalid bearer tokens DRF answers 401 itself; this is for
    authorization (a buyer shipping someone else's order, a non-claimant
    filing a dispute).
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Duplicate entries (unique constraint violations)
    - Lost races on conditional updates
    - Invalid state transitions
    """

    default_error_code: str = "CONFLICT"
    status_code: int = 409


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Log the original error for debugging but don't expose provider internals
    to clients.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    status_code: int = 502


class DownstreamNotificationFailure(ExternalServiceError):
    """
    Email or in-app notification could not be delivered.

    Never surfaced to API callers: the primary state change has already
    committed when this happens, so callers log it and move on.
    """

    default_error_code: str = "DOWNSTREAM_NOTIFICATION_FAILURE"
