"""Database models for files app."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

from server.apps.nodes.models import StorageNode
from server.apps.teams.models import Team

# Constants for field max lengths
_FILE_NAME_MAX_LENGTH: Final = 255
_MIME_TYPE_MAX_LENGTH: Final = 255
_CHOICE_MAX_LENGTH: Final = 32


class FileStatus(models.TextChoices):
    """Position of a file in the approval workflow.

    ``REJECTED`` is reported for a rejected create; the record is deleted
    in the same transaction, so it is never stored.
    """

    PENDING_CONFIRMATION = 'pending_confirmation', 'Pending confirmation'
    PENDING_APPROVAL = 'pending_approval', 'Pending approval'
    PENDING_DELETE = 'pending_delete', 'Pending delete'
    SYNCED = 'synced', 'Synced'
    REJECTED = 'rejected', 'Rejected'


class ChangeType(models.TextChoices):
    """Kind of change a file is (or was last) going through."""

    CREATE = 'create', 'Create'
    EDIT = 'edit', 'Edit'
    DELETE = 'delete', 'Delete'


@final
class File(models.Model):
    """Team file tracked through member confirmation and leader approval.

    Content lives in the database; storage nodes only account for its
    size. While an edit is pending, ``previous_*`` fields hold the last
    approved version so a rejection can restore it.

    ``version`` is bumped by every transition and guards against two
    actions racing on the same file.
    """

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='owned_files',
    )

    name = models.CharField(
        max_length=_FILE_NAME_MAX_LENGTH,
    )

    file_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        help_text='MIME type declared on upload or guessed from the name',
    )

    size = models.BigIntegerField(
        help_text='Content size in bytes',
    )

    content = models.TextField(blank=True, default='')

    primary_node = models.ForeignKey(
        StorageNode,
        on_delete=models.PROTECT,
        related_name='primary_files',
    )

    replica_nodes = models.ManyToManyField(
        StorageNode,
        related_name='replica_files',
        blank=True,
        help_text='Backup nodes holding the last approved version',
    )

    status = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=FileStatus.choices,
        default=FileStatus.PENDING_CONFIRMATION,
        db_index=True,
    )

    change_type = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=ChangeType.choices,
        default=ChangeType.CREATE,
    )

    # Last approved version, kept while an edit is pending
    previous_content = models.TextField(null=True, blank=True)
    previous_name = models.CharField(
        max_length=_FILE_NAME_MAX_LENGTH,
        null=True,
        blank=True,
    )
    previous_size = models.BigIntegerField(null=True, blank=True)
    previous_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        null=True,
        blank=True,
    )

    last_modified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='modified_files',
        help_text='Initiator of the current (or last) change',
    )

    version = models.PositiveIntegerField(default=1)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    last_modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-last_modified_at']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['team', 'status'],
                name='files_team_status_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            models.CheckConstraint(
                condition=models.Q(size__gte=0),
                name='files_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.team.name}:{self.name} ({self.status})'

    @property
    def has_pending_edit(self) -> bool:
        """Whether an unapproved edit is waiting on this file."""
        return self.change_type == ChangeType.EDIT and self.status in {
            FileStatus.PENDING_CONFIRMATION,
            FileStatus.PENDING_APPROVAL,
        }

    @property
    def committed_size(self) -> int:
        """Size currently accounted on the nodes.

        Edits only move node counters once approved, so a pending edit
        still occupies the size of the previous version.
        """
        if self.has_pending_edit and self.previous_size is not None:
            return self.previous_size
        return self.size
