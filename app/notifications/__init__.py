"""
Notifications app: in-app notification writer and inbox API.

Usage:
    from notifications.models import NotificationKind
    from notifications.services import NotificationService

    result = NotificationService.create_notification(
        recipient=user,
        type_key=NotificationKind.BOOKING_CONFIRMED,
        title="Your session is confirmed",
        idempotency_key=f"booking-confirmed:{booking.id}:{user.id}",
    )
"""
