"""Django admin configuration for nodes app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.files.infrastructure.metadata import format_bytes
from server.apps.nodes.models import StorageNode


@admin.register(StorageNode)
class StorageNodeAdmin(admin.ModelAdmin[StorageNode]):
    """Admin interface for StorageNode model.

    Counters are read-only; use the ``recalculate_nodes`` command to
    repair them.
    """

    list_display = [
        'name',
        'team',
        'role',
        'status',
        'total_display',
        'used_display',
        'file_count',
        'usage_display',
    ]

    list_filter = [
        'role',
        'status',
        'team',
    ]

    search_fields = [
        'name',
        'team__name',
    ]

    readonly_fields = [
        'team',
        'role',
        'total_storage',
        'used_storage',
        'available_storage',
        'file_count',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Node', {
            'fields': ('name', 'team', 'role', 'status'),
        }),
        ('Capacity', {
            'fields': (
                'total_storage',
                'used_storage',
                'available_storage',
                'file_count',
            ),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def total_display(self, obj: StorageNode) -> str:
        """Display capacity in human-readable format."""
        return format_bytes(obj.total_storage)
    total_display.short_description = 'Capacity'  # type: ignore[attr-defined]

    def used_display(self, obj: StorageNode) -> str:
        """Display used bytes in human-readable format."""
        return format_bytes(obj.used_storage)
    used_display.short_description = 'Used'  # type: ignore[attr-defined]

    def usage_display(self, obj: StorageNode) -> str:
        """Display status indicator based on usage.

        Args:
            obj: StorageNode instance.

        Returns:
            HTML formatted usage percentage.
        """
        if obj.total_storage == 0:
            percentage = 0.0
        else:
            percentage = (obj.used_storage / obj.total_storage) * 100

        if percentage >= 100:
            color = '#dc3545'  # Red - full
        elif percentage >= 90:
            color = '#ffc107'  # Yellow - warning
        else:
            color = '#28a745'  # Green - ok

        return format_html(
            '<span style="color: {color}; font-weight: bold;">'
            '{percentage}%</span>',
            color=color,
            percentage=f'{percentage:.1f}',
        )
    usage_display.short_description = 'Usage'  # type: ignore[attr-defined]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Nodes are provisioned together with their team."""
        return False

    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: StorageNode | None = None,
    ) -> bool:
        """Nodes live as long as their team."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[StorageNode]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('team')
