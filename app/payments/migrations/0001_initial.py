import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ConnectedAccount",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("stripe_account_id", models.CharField(db_index=True, help_text="Stripe Account ID (acct_xxx)", max_length=255, unique=True)),
                ("onboarding_status", models.CharField(choices=[("not_started", "Not Started"), ("in_progress", "In Progress"), ("complete", "Complete"), ("rejected", "Rejected")], db_index=True, default="not_started", help_text="Current Stripe Connect onboarding status", max_length=20)),
                ("payouts_enabled", models.BooleanField(default=False, help_text="Whether Stripe has enabled payouts for this account")),
                ("charges_enabled", models.BooleanField(default=False, help_text="Whether Stripe has enabled charges for this account")),
                ("onboarding_required", models.BooleanField(default=True, help_text="Whether Stripe has currently due or past due requirements")),
                ("metadata", models.JSONField(blank=True, default=dict, help_text="Requirements snapshot and other Stripe account details")),
                ("user", models.OneToOneField(help_text="User this connected account belongs to", on_delete=django.db.models.deletion.PROTECT, related_name="connected_account", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Connected Account",
                "verbose_name_plural": "Connected Accounts",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="WebhookEvent",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("stripe_event_id", models.CharField(help_text="Stripe Event ID (evt_xxx)", max_length=255, unique=True)),
                ("event_type", models.CharField(db_index=True, help_text="Stripe event type (e.g., 'checkout.session.completed')", max_length=100)),
                ("payload", models.JSONField(help_text="Verified webhook payload")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("processing", "Processing"), ("processed", "Processed"), ("failed", "Failed")], db_index=True, default="pending", max_length=20)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("retry_count", models.PositiveSmallIntegerField(default=0, help_text="Number of processing attempts")),
            ],
            options={
                "verbose_name": "Webhook Event",
                "verbose_name_plural": "Webhook Events",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "retry_count"], name="webhook_status_retry_idx"),
                    models.Index(fields=["event_type", "created_at"], name="webhook_type_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("reference_type", models.CharField(choices=[("order", "Order"), ("booking", "Booking")], max_length=20)),
                ("reference_id", models.UUIDField(help_text="UUID of the order or booking")),
                ("entry_type", models.CharField(choices=[("sale", "Sale"), ("commission", "Commission"), ("refund", "Refund")], max_length=20)),
                ("amount_cents", models.BigIntegerField(help_text="Signed amount in cents")),
                ("currency", models.CharField(default="usd", max_length=3)),
                ("balance_bucket", models.CharField(choices=[("available", "Available"), ("on_hold", "On Hold")], default="available", max_length=20)),
                ("note", models.TextField(blank=True, default="")),
                ("idempotency_key", models.CharField(help_text="Unique key to prevent duplicate entries", max_length=255, unique=True)),
                ("seller", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="ledger_entries", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name_plural": "Ledger entries",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["reference_type", "reference_id"], name="ledger_reference_idx"),
                    models.Index(fields=["seller", "created_at"], name="ledger_seller_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_cents", 0), _negated=True), name="ledger_entry_amount_nonzero"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SellerBalance",
            fields=[
                ("seller", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, primary_key=True, related_name="seller_balance", serialize=False, to=settings.AUTH_USER_MODEL)),
                ("available_cents", models.BigIntegerField(default=0)),
                ("on_hold_cents", models.BigIntegerField(default=0)),
                ("currency", models.CharField(default="usd", max_length=3)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Seller balance",
            },
        ),
    ]
