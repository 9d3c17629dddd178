"""
Payment admin configuration.

Imports the ledger admin so it is registered with the app, and registers
the Connect and webhook models.
"""

from django.contrib import admin

from payments.ledger.admin import LedgerEntryAdmin, SellerBalanceAdmin
from payments.models import ConnectedAccount, WebhookEvent
from payments.state_machines import WebhookEventStatus

__all__ = [
    "LedgerEntryAdmin",
    "SellerBalanceAdmin",
    "ConnectedAccountAdmin",
    "WebhookEventAdmin",
]


@admin.register(ConnectedAccount)
class ConnectedAccountAdmin(admin.ModelAdmin):
    """Visibility into Stripe Connect account status."""

    list_display = [
        "id",
        "user",
        "stripe_account_id",
        "onboarding_status",
        "payouts_enabled",
        "charges_enabled",
        "onboarding_required",
        "created_at",
    ]
    list_filter = ["onboarding_status", "payouts_enabled", "charges_enabled"]
    search_fields = ["id", "stripe_account_id", "user__email"]
    readonly_fields = ["id", "created_at", "updated_at", "metadata"]
    ordering = ["-created_at"]


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """
    Admin configuration for WebhookEvent.

    Payloads are immutable. Failed events can be re-queued with the
    "Retry" action.
    """

    list_display = [
        "id",
        "stripe_event_id",
        "event_type",
        "status",
        "retry_count",
        "processed_at",
        "created_at",
    ]
    list_filter = ["status", "event_type", "created_at"]
    search_fields = ["id", "stripe_event_id", "event_type"]
    readonly_fields = [
        "id",
        "created_at",
        "updated_at",
        "stripe_event_id",
        "event_type",
        "payload",
        "processed_at",
        "retry_count",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    actions = ["retry_events"]

    fieldsets = (
        (None, {"fields": ("id", "stripe_event_id", "event_type", "status")}),
        ("Processing", {"fields": ("processed_at", "retry_count")}),
        ("Error Info", {"fields": ("error_message",), "classes": ("collapse",)}),
        ("Payload", {"fields": ("payload",), "classes": ("collapse",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )

    @admin.action(description="Retry selected failed events")
    def retry_events(self, request, queryset):
        from payments.tasks import process_webhook_event

        failed = queryset.filter(status=WebhookEventStatus.FAILED)
        count = 0
        for event in failed:
            process_webhook_event.delay(str(event.id))
            count += 1
        self.message_user(request, f"Queued {count} event(s) for retry.")

    def has_delete_permission(self, request, obj=None) -> bool:
        """Webhook events are the audit trail."""
        return False

    def has_add_permission(self, request) -> bool:
        return False
