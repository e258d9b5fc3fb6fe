"""Django admin configuration for notifications app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin[Notification]):
    """Admin interface for Notification model (append-only log)."""

    list_display = [
        'recipient',
        'team',
        'file_name',
        'change_type',
        'requires_approval',
        'action_status',
        'read',
        'created_at',
    ]

    list_filter = [
        'team',
        'change_type',
        'requires_approval',
        'action_status',
        'read',
    ]

    search_fields = [
        'message',
        'file_name',
        'recipient__username',
    ]

    readonly_fields = [
        'team',
        'recipient',
        'message',
        'related_file',
        'file_name',
        'change_type',
        'initiated_by',
        'requires_approval',
        'action_status',
        'approver',
        'read',
        'created_at',
        'resolved_at',
    ]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Notifications are raised by the workflow only."""
        return False

    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: Notification | None = None,
    ) -> bool:
        """Notifications are never deleted."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[Notification]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related(
            'team',
            'recipient',
            'initiated_by',
        )
