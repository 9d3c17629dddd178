import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        ("marketplace", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Dispute",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("dispute_type", models.CharField(choices=[("refund", "Refund request"), ("service_not_delivered", "Service not delivered"), ("quality_issue", "Quality issue"), ("payment_hold", "Payment hold")], max_length=30)),
                ("reason", models.TextField()),
                ("amount_cents", models.PositiveIntegerField()),
                ("status", django_fsm.FSMField(choices=[("pending", "Pending"), ("investigating", "Investigating"), ("resolved", "Resolved"), ("rejected", "Rejected")], db_index=True, default="pending", help_text="Dispute lifecycle status (managed by FSM)", max_length=50)),
                ("resolution_note", models.TextField(blank=True, default="")),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("booking", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="disputes", to="bookings.booking")),
                ("order", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="disputes", to="marketplace.order")),
                ("claimant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="disputes", to=settings.AUTH_USER_MODEL)),
                ("resolved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="resolved_disputes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(models.Q(("booking__isnull", False), ("order__isnull", True)), models.Q(("booking__isnull", True), ("order__isnull", False)), _connector="OR"), name="dispute_single_target"),
                ],
            },
        ),
    ]
