"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.files.infrastructure.metadata import format_bytes
from server.apps.files.models import File


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model.

    Read-only: status and node counters only change through the workflow.
    """

    list_display = [
        'name',
        'team',
        'owner',
        'status',
        'change_type',
        'size_display',
        'version',
        'last_modified_at',
    ]

    list_filter = [
        'status',
        'change_type',
        'team',
    ]

    search_fields = [
        'name',
        'owner__username',
    ]

    readonly_fields = [
        'team',
        'owner',
        'name',
        'file_type',
        'size',
        'content',
        'primary_node',
        'replica_nodes',
        'status',
        'change_type',
        'previous_content',
        'previous_name',
        'previous_size',
        'previous_type',
        'last_modified_by',
        'version',
        'created_at',
        'last_modified_at',
    ]

    fieldsets = (
        ('File Information', {
            'fields': ('team', 'owner', 'name', 'file_type', 'size', 'content'),
        }),
        ('Workflow', {
            'fields': (
                'status',
                'change_type',
                'last_modified_by',
                'version',
            ),
        }),
        ('Pending Edit', {
            'fields': (
                'previous_name',
                'previous_type',
                'previous_size',
                'previous_content',
            ),
        }),
        ('Placement', {
            'fields': ('primary_node', 'replica_nodes'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_modified_at'),
        }),
    )

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string (e.g., '1.5 MB', '234 KB').
        """
        return format_bytes(obj.size)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Files are only created through the workflow."""
        return False

    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: File | None = None,
    ) -> bool:
        """Files are only removed by an approved delete or a rejected upload."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('team', 'owner')
