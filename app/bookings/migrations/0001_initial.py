import uuid

import django.db.models.deletion
import django.utils.timezone
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Provider",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("display_name", models.CharField(max_length=200)),
                ("price_cents", models.PositiveIntegerField(blank=True, help_text="Price of one session in cents", null=True)),
                ("currency", models.CharField(default="usd", max_length=3)),
                ("meeting_provider", models.CharField(choices=[("jitsi", "Built-in (Jitsi)"), ("zoom", "Zoom"), ("google_meet", "Google Meet"), ("custom", "Custom link")], default="jitsi", max_length=20)),
                ("meeting_base_url", models.URLField(blank=True, default="")),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="provider", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["display_name"],
            },
        ),
        migrations.CreateModel(
            name="CreditBundle",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("bundle_size", models.PositiveSmallIntegerField()),
                ("credits_left", models.PositiveSmallIntegerField()),
                ("price_cents", models.PositiveIntegerField(help_text="Amount paid for the bundle")),
                ("currency", models.CharField(default="usd", max_length=3)),
                ("purchased_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("stripe_session_id", models.CharField(blank=True, help_text="Checkout session that paid for this bundle", max_length=255, null=True, unique=True)),
                ("buyer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="credit_bundles", to=settings.AUTH_USER_MODEL)),
                ("provider", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="credit_bundles", to="bookings.provider")),
            ],
            options={
                "ordering": ["purchased_at", "created_at"],
                "indexes": [
                    models.Index(fields=["buyer", "provider", "credits_left"], name="bundle_buyer_provider_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("credits_left__gte", 0)), name="bundle_credits_left_non_negative"),
                    models.CheckConstraint(condition=models.Q(("credits_left__lte", models.F("bundle_size"))), name="bundle_credits_left_within_size"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("status", django_fsm.FSMField(choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("completed", "Completed"), ("cancelled", "Cancelled"), ("refunded", "Refunded")], db_index=True, default="pending", help_text="Booking lifecycle status (managed by FSM)", max_length=50)),
                ("payment_status", models.CharField(choices=[("pending", "Pending"), ("paid", "Paid"), ("refunded", "Refunded")], db_index=True, default="pending", max_length=20)),
                ("used_credit", models.BooleanField(default=False)),
                ("amount_cents", models.PositiveIntegerField(default=0)),
                ("currency", models.CharField(default="usd", max_length=3)),
                ("notes", models.TextField(blank=True, default="")),
                ("session_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("join_url", models.CharField(blank=True, default="", max_length=500)),
                ("join_expires_at", models.DateTimeField(blank=True, null=True)),
                ("stripe_session_id", models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ("stripe_payment_intent_id", models.CharField(blank=True, default="", max_length=255)),
                ("stripe_charge_id", models.CharField(blank=True, default="", max_length=255)),
                ("stripe_transfer_id", models.CharField(blank=True, default="", max_length=255)),
                ("application_fee_cents", models.PositiveIntegerField(blank=True, null=True)),
                ("net_amount_cents", models.PositiveIntegerField(blank=True, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                ("reminder_1h_sent", models.BooleanField(default=False)),
                ("reminder_5m_sent", models.BooleanField(default=False)),
                ("buyer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookings", to=settings.AUTH_USER_MODEL)),
                ("provider", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookings", to="bookings.provider")),
                ("credit_bundle", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="bookings", to="bookings.creditbundle")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "session_at"], name="booking_status_session_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("used_credit", True), ("stripe_session_id__isnull", False), _negated=True), name="booking_single_funding_path"),
                ],
            },
        ),
        migrations.CreateModel(
            name="XPAward",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("amount", models.PositiveIntegerField()),
                ("reason", models.CharField(choices=[("session_booked", "Session booked"), ("first_session", "First session")], max_length=50)),
                ("reference_type", models.CharField(blank=True, default="", max_length=20)),
                ("reference_id", models.UUIDField(blank=True, null=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="xp_awards", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "reason", "reference_id"), name="xp_award_once_per_reference"),
                    models.UniqueConstraint(condition=models.Q(("reason", "first_session")), fields=("user",), name="xp_first_session_once"),
                ],
            },
        ),
    ]
