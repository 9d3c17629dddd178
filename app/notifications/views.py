"""
Views for the notification inbox.

Endpoints:
    GET /api/v1/notifications/ - Inbox, newest first (filter by ?kind=, ?unread=)
    GET /api/v1/notifications/{id}/ - Single notification
    GET /api/v1/notifications/unread-count/ - Badge counter
    POST /api/v1/notifications/{id}/read/ - Mark one as read
    POST /api/v1/notifications/read-all/ - Mark the whole inbox as read

Notifications are written by the booking, marketplace and dispute services;
this API is read-and-acknowledge only.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.exceptions import ValidationError
from core.views import error_response
from notifications.models import Notification, NotificationKind
from notifications.serializers import (
    MarkAllReadResponseSerializer,
    NotificationSerializer,
    UnreadCountSerializer,
)
from notifications.services import NotificationService

TAGS = ["Notifications"]


@extend_schema_view(
    list=extend_schema(
        operation_id="list_notifications",
        summary="List inbox",
        parameters=[
            OpenApiParameter(
                name="unread",
                type=bool,
                location=OpenApiParameter.QUERY,
                description="Only unread notifications when true",
                required=False,
            ),
            OpenApiParameter(
                name="kind",
                type=str,
                location=OpenApiParameter.QUERY,
                enum=NotificationKind.values,
                description="Only notifications of this kind",
                required=False,
            ),
        ],
        responses={
            200: NotificationSerializer(many=True),
            400: OpenApiResponse(description="Unknown notification kind"),
        },
        tags=TAGS,
    ),
    retrieve=extend_schema(
        operation_id="get_notification",
        summary="Get notification",
        tags=TAGS,
    ),
)
class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Inbox for the authenticated user.

    The queryset is scoped to the recipient, so other users' ids 404.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        queryset = Notification.objects.filter(recipient=self.request.user)
        return queryset.select_related("actor", "actor__profile")

    def filter_queryset(self, queryset):
        if self.action != "list":
            return queryset

        params = self.request.query_params
        if params.get("unread", "").lower() == "true":
            queryset = queryset.filter(is_read=False)

        kind = params.get("kind")
        if kind:
            if kind not in NotificationKind.values:
                raise ValidationError(
                    "Unknown notification kind",
                    error_code="UNKNOWN_NOTIFICATION_KIND",
                    details={"kind": kind, "supported": NotificationKind.values},
                )
            queryset = queryset.filter(type_key=kind)

        return queryset

    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except ValidationError as exc:
            return error_response(exc)

    @extend_schema(
        operation_id="get_unread_notification_count",
        summary="Unread count",
        responses={200: UnreadCountSerializer},
        tags=TAGS,
    )
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        count = self.get_queryset().filter(is_read=False).count()
        return Response(UnreadCountSerializer({"unread_count": count}).data)

    @extend_schema(
        operation_id="mark_notification_read",
        summary="Mark notification as read",
        request=None,
        responses={
            200: NotificationSerializer,
            404: OpenApiResponse(description="Not in this user's inbox"),
        },
        tags=TAGS,
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        result = NotificationService.mark_as_read(self.get_object(), request.user)
        if not result.success:
            return Response(
                result.to_response(), status=status.HTTP_400_BAD_REQUEST
            )
        return Response(self.get_serializer(result.data).data)

    @extend_schema(
        operation_id="mark_all_notifications_read",
        summary="Mark inbox as read",
        request=None,
        responses={200: MarkAllReadResponseSerializer},
        tags=TAGS,
    )
    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        result = NotificationService.mark_all_as_read(request.user)
        return Response(
            MarkAllReadResponseSerializer({"marked_count": result.data}).data
        )
