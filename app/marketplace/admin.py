"""
Django admin configuration for the marketplace.

Order status is FSM-managed and read-only here.
"""

from django.contrib import admin

from marketplace.models import Fulfillment, Listing, Order


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ["title", "seller", "kind", "price_cents", "inventory", "is_active"]
    list_filter = ["kind", "is_active"]
    search_fields = ["title", "seller__email"]
    raw_id_fields = ["seller"]


class FulfillmentInline(admin.StackedInline):
    model = Fulfillment
    extra = 0
    readonly_fields = ["carrier", "tracking_number", "label_url", "shipped_at"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "listing",
        "buyer",
        "seller",
        "kind",
        "status",
        "total_cents",
        "paid_at",
    ]
    list_filter = ["kind", "status", "payment_status"]
    search_fields = ["id", "buyer__email", "seller__email", "stripe_session_id"]
    raw_id_fields = ["buyer", "seller", "listing"]
    readonly_fields = [
        "status",
        "payment_status",
        "subtotal_cents",
        "shipping_cents",
        "platform_fee_cents",
        "total_cents",
        "stripe_session_id",
        "stripe_payment_intent_id",
        "stripe_charge_id",
        "delivery_link_hash",
        "paid_at",
        "refunded_at",
    ]
    inlines = [FulfillmentInline]
    date_hierarchy = "created_at"
