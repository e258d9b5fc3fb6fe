"""Database models for nodes app."""

from typing import ClassVar, Final, final, override

from django.db import models

from server.apps.teams.models import Team

_NODE_NAME_MAX_LENGTH: Final = 120
_CHOICE_MAX_LENGTH: Final = 16


class NodeRole(models.TextChoices):
    """Position of a node within its team."""

    PRIMARY = 'primary', 'Primary'
    BACKUP = 'backup', 'Backup'


class NodeStatus(models.TextChoices):
    """Reported health of a node (informational)."""

    ACTIVE = 'active', 'Active'
    OFFLINE = 'offline', 'Offline'


@final
class StorageNode(models.Model):
    """Simulated storage node with capacity counters.

    Nodes hold no bytes. ``used_storage`` and ``available_storage`` are
    bookkeeping values that always add up to ``total_storage``; the
    database enforces this with check constraints.
    """

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name='nodes',
        db_index=True,
    )

    name = models.CharField(
        max_length=_NODE_NAME_MAX_LENGTH,
    )

    role = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=NodeRole.choices,
    )

    total_storage = models.BigIntegerField(
        help_text='Capacity in bytes',
    )

    used_storage = models.BigIntegerField(
        default=0,
        help_text='Bytes accounted to files on this node',
    )

    available_storage = models.BigIntegerField(
        help_text='Bytes still free (total - used)',
    )

    file_count = models.IntegerField(
        default=0,
    )

    status = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=NodeStatus.choices,
        default=NodeStatus.ACTIVE,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Storage Node'  # type: ignore[mutable-override]
        verbose_name_plural = 'Storage Nodes'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['team', 'role', 'name']

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.UniqueConstraint(
                fields=['team', 'name'],
                name='nodes_team_name_unique',
            ),
            # One primary node per team
            models.UniqueConstraint(
                fields=['team'],
                condition=models.Q(role='primary'),
                name='nodes_team_single_primary',
            ),
            models.CheckConstraint(
                condition=models.Q(used_storage__gte=0),
                name='nodes_used_storage_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(available_storage__gte=0),
                name='nodes_available_storage_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(file_count__gte=0),
                name='nodes_file_count_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(
                    total_storage=models.F('used_storage') + models.F('available_storage'),
                ),
                name='nodes_storage_balanced',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.name}: {self.used_storage}/{self.total_storage}'

    @property
    def is_primary(self) -> bool:
        """Whether this is the team's primary node."""
        return self.role == NodeRole.PRIMARY

    def has_space_for(self, size_bytes: int) -> bool:
        """Check if there's enough space for the given size.

        Args:
            size_bytes: Size to check in bytes.

        Returns:
            True if there's enough space, False otherwise.
        """
        return self.available_storage >= size_bytes
