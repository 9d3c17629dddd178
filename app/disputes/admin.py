"""
Django admin configuration for disputes.

Resolution goes through the resolve endpoint so the refund, ledger entry
and notifications happen together; the admin only moves pending disputes
to investigating.
"""

from django.contrib import admin, messages

from disputes.models import Dispute
from disputes.services import DisputeService


@admin.register(Dispute)
class DisputeAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "claimant",
        "dispute_type",
        "status",
        "amount_cents",
        "booking",
        "order",
        "created_at",
    ]
    list_filter = ["status", "dispute_type"]
    search_fields = ["id", "claimant__email", "reason"]
    raw_id_fields = ["claimant", "booking", "order", "resolved_by"]
    readonly_fields = ["status", "resolution_note", "resolved_by", "resolved_at"]
    actions = ["start_investigation"]

    @admin.action(description="Start investigating selected disputes")
    def start_investigation(self, request, queryset):
        count = 0
        for dispute_id in queryset.values_list("id", flat=True):
            result = DisputeService.start_investigation(dispute_id, request.user)
            if result.success:
                count += 1
        level = messages.SUCCESS if count else messages.WARNING
        self.message_user(
            request, f"{count} dispute(s) now under investigation.", level=level
        )
