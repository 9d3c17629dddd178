"""
Celery application for the settlement core.

Redis is the broker and result backend. Tasks live in each app's tasks.py
and are auto-discovered:

- payments.tasks: webhook processing and the failed-webhook retry sweep
- bookings.tasks: session reminders and booking achievements
- toolkit.tasks: transactional email with retries

Periodic schedules are stored in the database (django-celery-beat) and
seeded by data migrations.

Usage:
    celery -A config worker -l info
    celery -A config beat -l info
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("settlement")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
