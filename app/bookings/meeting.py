"""
Join URL resolution for confirmed bookings.

Pure function, no I/O: the same inputs always give the same URL.
"""

from __future__ import annotations

import uuid

from django.conf import settings

BUILTIN_PROVIDER = "jitsi"


def resolve_join_url(
    provider: str,
    provider_base_url: str | None,
    booking_id: uuid.UUID | str,
) -> str:
    """
    Resolve the URL both participants use to join a session.

    The built-in provider gets a deterministic room per booking, hosted on
    the provider's own base URL when one is set. Every other provider gets
    its configured base URL unchanged, or "" when none is configured.

    Example:
        resolve_join_url("jitsi", "", "7c9e...")
        # "https://meet.jit.si/session-7c9e..."
    """
    base_url = (provider_base_url or "").strip()

    if provider == BUILTIN_PROVIDER:
        host = (base_url or settings.BUILTIN_MEETING_BASE_URL).rstrip("/")
        return f"{host}/{settings.BUILTIN_MEETING_ROOM_PREFIX}-{booking_id}"

    return base_url
