"""
URL configuration for the disputes app.

Routes:
    - POST /                 - File a dispute
    - POST /{id}/resolve/    - Resolve a dispute (staff only)

All routes are prefixed with /api/v1/disputes/ when included in the main URLconf.
"""

from django.urls import path

from disputes.views import DisputeCreateView, ResolveDisputeView

app_name = "disputes"

urlpatterns = [
    path("", DisputeCreateView.as_view(), name="dispute_create"),
    path(
        "<uuid:dispute_id>/resolve/",
        ResolveDisputeView.as_view(),
        name="dispute_resolve",
    ),
]
