"""
Django admin configuration for bookings.

Booking status is FSM-managed and read-only here; refunds go through
dispute resolution.
"""

from django.contrib import admin

from bookings.models import Booking, CreditBundle, Provider, XPAward


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    list_display = [
        "display_name",
        "user",
        "price_cents",
        "currency",
        "meeting_provider",
        "is_active",
    ]
    list_filter = ["meeting_provider", "is_active"]
    search_fields = ["display_name", "user__email"]
    raw_id_fields = ["user"]


@admin.register(CreditBundle)
class CreditBundleAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "buyer",
        "provider",
        "credits_left",
        "bundle_size",
        "price_cents",
        "purchased_at",
    ]
    search_fields = ["id", "buyer__email", "stripe_session_id"]
    raw_id_fields = ["buyer", "provider"]
    readonly_fields = [
        "bundle_size",
        "credits_left",
        "price_cents",
        "stripe_session_id",
        "purchased_at",
    ]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "buyer",
        "provider",
        "status",
        "payment_status",
        "used_credit",
        "amount_cents",
        "session_at",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "used_credit"]
    search_fields = ["id", "buyer__email", "stripe_session_id", "stripe_charge_id"]
    raw_id_fields = ["buyer", "provider", "credit_bundle"]
    readonly_fields = [
        "status",
        "payment_status",
        "stripe_session_id",
        "stripe_payment_intent_id",
        "stripe_charge_id",
        "stripe_transfer_id",
        "application_fee_cents",
        "net_amount_cents",
        "confirmed_at",
        "cancelled_at",
        "refunded_at",
        "reminder_1h_sent",
        "reminder_5m_sent",
    ]
    date_hierarchy = "created_at"


@admin.register(XPAward)
class XPAwardAdmin(admin.ModelAdmin):
    list_display = ["user", "reason", "amount", "reference_id", "created_at"]
    list_filter = ["reason"]
    raw_id_fields = ["user"]
