"""
Tests for join URL resolution.
"""

import uuid

import pytest

from bookings.meeting import resolve_join_url

BOOKING_ID = uuid.UUID("7c9e6679-7425-40de-944b-e07fc1f90ae7")


class TestResolveJoinUrl:
    @pytest.fixture(autouse=True)
    def meeting_settings(self, settings):
        settings.BUILTIN_MEETING_BASE_URL = "https://meet.jit.si"
        settings.BUILTIN_MEETING_ROOM_PREFIX = "session"

    def test_builtin_provider_gets_room_per_booking(self):
        url = resolve_join_url("jitsi", "", BOOKING_ID)

        assert url == f"https://meet.jit.si/session-{BOOKING_ID}"

    def test_builtin_provider_is_deterministic(self):
        """Resolving twice for the same booking gives the same room."""
        assert resolve_join_url("jitsi", None, BOOKING_ID) == resolve_join_url(
            "jitsi", None, BOOKING_ID
        )

    def test_builtin_provider_uses_configured_host(self):
        url = resolve_join_url("jitsi", "https://video.example.com/", BOOKING_ID)

        assert url == f"https://video.example.com/session-{BOOKING_ID}"

    @pytest.mark.parametrize("provider", ["zoom", "google_meet", "custom"])
    def test_external_provider_returns_base_url(self, provider):
        base_url = "https://zoom.us/j/123456789"

        assert resolve_join_url(provider, base_url, BOOKING_ID) == base_url

    @pytest.mark.parametrize("base_url", ["", None, "   "])
    def test_external_provider_without_base_url_is_empty(self, base_url):
        assert resolve_join_url("zoom", base_url, BOOKING_ID) == ""
