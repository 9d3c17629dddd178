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
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("type_key", models.CharField(choices=[("booking_confirmed", "Booking confirmed"), ("session_reminder", "Session reminder"), ("order_paid", "Order paid"), ("order_shipped", "Order shipped"), ("digital_delivered", "Digital delivery ready"), ("dispute_opened", "Dispute opened"), ("dispute_resolved", "Dispute resolved"), ("dispute_rejected", "Dispute rejected"), ("achievement", "Achievement unlocked")], db_index=True, max_length=50)),
                ("title", models.CharField(max_length=500)),
                ("body", models.TextField(blank=True, default="")),
                ("link", models.CharField(blank=True, default="", max_length=500)),
                ("data", models.JSONField(blank=True, default=dict)),
                ("is_read", models.BooleanField(db_index=True, default=False)),
                ("idempotency_key", models.CharField(blank=True, help_text="Idempotency key to prevent duplicate notifications", max_length=255, null=True)),
                ("actor", models.ForeignKey(blank=True, help_text="User who triggered this notification (optional)", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="triggered_notifications", to=settings.AUTH_USER_MODEL)),
                ("recipient", models.ForeignKey(help_text="User receiving this notification", on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "notifications_notification",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["recipient", "is_read", "-created_at"], name="notif_recipient_unread_idx")],
                "constraints": [models.UniqueConstraint(condition=models.Q(("idempotency_key__isnull", False)), fields=("idempotency_key",), name="notif_idempotency_key_unique")],
            },
        ),
    ]
