"""
Django admin configuration for ledger models.

Ledger entries and seller balances are read-only in the admin; every
change goes through LedgerService.
"""

from django.contrib import admin

from .models import LedgerEntry, SellerBalance


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """
    Admin configuration for LedgerEntry.

    Entries are immutable; corrections are new entries.
    """

    list_display = [
        "id",
        "created_at",
        "seller",
        "entry_type",
        "amount_display",
        "balance_bucket",
        "reference_type",
        "reference_id",
    ]
    list_filter = ["entry_type", "reference_type", "balance_bucket", "created_at"]
    search_fields = ["id", "idempotency_key", "reference_id", "seller__email"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    @admin.display(description="Amount")
    def amount_display(self, obj: LedgerEntry) -> str:
        return f"${obj.amount_cents / 100:.2f} {obj.currency.upper()}"


@admin.register(SellerBalance)
class SellerBalanceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = [
        "seller",
        "available_cents",
        "on_hold_cents",
        "currency",
        "updated_at",
    ]
    search_fields = ["seller__email"]
