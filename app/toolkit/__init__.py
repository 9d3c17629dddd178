"""
Toolkit - shared outbound services.

Key components:
    - services/email.py: EmailService (transactional email)
    - tasks.py: send_email, the retrying Celery sender
    - helpers.py: PII masking for log records

This app has no models.
"""
