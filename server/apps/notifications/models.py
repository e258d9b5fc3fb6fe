"""Database models for notifications app."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

from server.apps.files.models import ChangeType, File
from server.apps.teams.models import Team

_FILE_NAME_MAX_LENGTH: Final = 255
_CHOICE_MAX_LENGTH: Final = 16


class ActionStatus(models.TextChoices):
    """Outcome of a notification that asks the leader to act."""

    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


@final
class Notification(models.Model):
    """Workflow event addressed to one team member.

    Approval requests carry ``requires_approval=True`` and an
    ``action_status``; informational notices leave ``action_status``
    unset. Rows survive deletion of the related file, ``file_name``
    keeps the reference readable.
    """

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name='notifications',
        db_index=True,
    )

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
    )

    message = models.TextField()

    related_file = models.ForeignKey(
        File,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications',
    )

    file_name = models.CharField(
        max_length=_FILE_NAME_MAX_LENGTH,
        blank=True,
        default='',
    )

    change_type = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=ChangeType.choices,
    )

    initiated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='initiated_notifications',
    )

    requires_approval = models.BooleanField(default=False)

    action_status = models.CharField(
        max_length=_CHOICE_MAX_LENGTH,
        choices=ActionStatus.choices,
        null=True,
        blank=True,
    )

    approver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='resolved_notifications',
    )

    read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Notification'  # type: ignore[mutable-override]
        verbose_name_plural = 'Notifications'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at', '-id']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['team', 'recipient', 'read'],
                name='notif_team_recipient_read_idx',
            ),
        ]

        constraints: ClassVar[list[models.BaseConstraint]] = [
            # Informational notices never carry an action status
            models.CheckConstraint(
                condition=(
                    models.Q(requires_approval=True, action_status__isnull=False)
                    | models.Q(requires_approval=False, action_status__isnull=True)
                ),
                name='notif_action_status_matches_approval',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.recipient}: {self.message}'
