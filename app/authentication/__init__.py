"""
Authentication application.

Email-identified users and their display profiles. Bearer tokens are
validated by djangorestframework-simplejwt; no login or registration flows
live here.

Usage:
    from authentication.models import User, Profile
"""
