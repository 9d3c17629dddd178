"""
Notification service layer.

Services:
    NotificationService: Notification creation and read status management

Writers call create_notification inside their own transaction when the
notification must commit together with a state change (reminder flags,
dispute outcomes). Duplicate idempotency keys come back as a DUPLICATE
failure instead of an exception so replays are harmless.

Usage:
    from notifications.services import NotificationService

    NotificationService.create_notification(
        recipient=booking.buyer,
        type_key=NotificationKind.SESSION_REMINDER,
        title="Session starts in 1 hour",
        link=f"/bookings/{booking.id}",
        idempotency_key=f"booking-reminder:{booking.id}:1h:{booking.buyer_id}",
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction

from core.services import BaseService, ServiceResult
from notifications.models import Notification

if TYPE_CHECKING:
    from authentication.models import User


class NotificationService(BaseService):
    """Creates notifications and manages read status."""

    @classmethod
    def create_notification(
        cls,
        recipient: User,
        type_key: str,
        title: str,
        body: str = "",
        link: str = "",
        data: dict | None = None,
        actor: User | None = None,
        idempotency_key: str | None = None,
    ) -> ServiceResult[Notification]:
        """
        Create a notification for a user.

        Error codes:
            DUPLICATE: A notification with this idempotency_key already exists
        """
        if idempotency_key and Notification.objects.filter(
            idempotency_key=idempotency_key
        ).exists():
            cls.get_logger().info(
                "Duplicate notification prevented",
                extra={"idempotency_key": idempotency_key},
            )
            return ServiceResult.failure(
                f"Notification with idempotency_key already exists: {idempotency_key}",
                error_code="DUPLICATE",
            )

        try:
            # Savepoint keeps a duplicate insert from aborting the outer transaction
            with transaction.atomic():
                notification = Notification.objects.create(
                    recipient=recipient,
                    actor=actor,
                    type_key=type_key,
                    title=title,
                    body=body,
                    link=link,
                    data=data or {},
                    idempotency_key=idempotency_key,
                )
        except IntegrityError:
            return ServiceResult.failure(
                f"Notification with idempotency_key already exists: {idempotency_key}",
                error_code="DUPLICATE",
            )

        cls.get_logger().info(
            "Notification created",
            extra={
                "notification_id": notification.id,
                "recipient_id": recipient.pk,
                "type_key": type_key,
            },
        )
        return ServiceResult.success(notification)

    @classmethod
    def mark_as_read(
        cls,
        notification: Notification,
        user: User,
    ) -> ServiceResult[Notification]:
        """
        Mark a single notification as read. Idempotent.

        Error codes:
            NOT_OWNER: User doesn't own the notification
        """
        if notification.recipient_id != user.id:
            cls.get_logger().warning(
                "Attempt to mark foreign notification",
                extra={"user_id": user.id, "notification_id": notification.id},
            )
            return ServiceResult.failure(
                "Cannot mark notification you don't own",
                error_code="NOT_OWNER",
            )

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])

        return ServiceResult.success(notification)

    @classmethod
    def mark_all_as_read(cls, user: User) -> ServiceResult[int]:
        """Mark every unread notification of the user as read in one query."""
        count = Notification.objects.filter(recipient=user, is_read=False).update(
            is_read=True
        )
        cls.get_logger().info(
            "Marked notifications read", extra={"user_id": user.id, "count": count}
        )
        return ServiceResult.success(count)
