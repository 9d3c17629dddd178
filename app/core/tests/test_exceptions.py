"""
Tests for the application exception hierarchy.
"""

from core.exceptions import (
    BaseApplicationError,
    DownstreamNotificationFailure,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)


class TestBaseApplicationError:
    def test_defaults(self):
        exc = ValidationError("provider_id is required")

        assert exc.error_code == "VALIDATION_ERROR"
        assert exc.status_code == 400
        assert str(exc) == "[VALIDATION_ERROR] provider_id is required"

    def test_to_dict_omits_empty_details(self):
        exc = NotFoundError("Provider not found", error_code="PROVIDER_NOT_FOUND")

        assert exc.to_dict() == {
            "error": "Provider not found",
            "error_code": "PROVIDER_NOT_FOUND",
        }

    def test_to_dict_includes_details(self):
        exc = BaseApplicationError("x", details={"provider_id": 3})

        assert exc.to_dict()["details"] == {"provider_id": 3}

    def test_downstream_failure_is_external(self):
        """Notification failures are external service errors."""
        exc = DownstreamNotificationFailure("smtp down")

        assert isinstance(exc, ExternalServiceError)
        assert exc.error_code == "DOWNSTREAM_NOTIFICATION_FAILURE"
