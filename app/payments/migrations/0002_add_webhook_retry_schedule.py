"""
Add celery-beat schedule for retrying failed webhook events.

Creates the periodic task for retry_failed_webhooks, which runs every
5 minutes and re-queues failed events that are under the retry cap.
"""

from django.db import migrations

TASK_NAME = "Retry Failed Webhook Events"


def create_periodic_task(apps, schema_editor):
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule, _ = IntervalSchedule.objects.get_or_create(
        every=5,
        period="minutes",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "payments.tasks.retry_failed_webhooks",
            "interval": schedule,
            "enabled": True,
            "description": (
                "Re-queues failed Stripe webhook events until they reach "
                "WEBHOOK_MAX_RETRIES attempts."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")
    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
