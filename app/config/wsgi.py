"""
WSGI config for the settlement core.

Fallback entry point for WSGI servers such as gunicorn; the primary
deployment serves config.asgi through Uvicorn.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
