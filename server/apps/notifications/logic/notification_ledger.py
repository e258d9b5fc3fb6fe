"""Business logic for workflow notifications."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from django.db import transaction
from django.utils import timezone

from server.apps.files.exceptions import InvalidTransitionError
from server.apps.files.models import File
from server.apps.notifications.models import ActionStatus, Notification
from server.apps.teams.models import Team

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WorkflowEvent:
    """Something that happened to a file and should reach a member."""

    team: Team
    recipient: _User
    message: str
    related_file: File | None
    change_type: str
    initiated_by: _User
    needs_leader_action: bool = False


@dataclass(frozen=True, slots=True)
class NotificationSnapshot:
    """Read-only view of a notification for presentation."""

    id: int
    message: str
    file_id: int | None
    file_name: str
    change_type: str
    initiated_by: str | None
    requires_approval: bool
    action_status: str | None
    approver: str | None
    read: bool
    created_at: datetime


def raise_event(event: WorkflowEvent) -> Notification:
    """Append a notification for the event.

    Args:
        event: Event to record.

    Returns:
        Created Notification instance.
    """
    notification = Notification.objects.create(
        team=event.team,
        recipient=event.recipient,
        message=event.message,
        related_file=event.related_file,
        file_name=event.related_file.name if event.related_file else '',
        change_type=event.change_type,
        initiated_by=event.initiated_by,
        requires_approval=event.needs_leader_action,
        action_status=ActionStatus.PENDING if event.needs_leader_action else None,
    )

    logger.info(
        'Notification %d raised for %s: %s',
        notification.pk,
        event.recipient.username,
        event.message,
    )
    return notification


def resolve(
    notification: Notification,
    outcome: ActionStatus,
    approver: _User,
) -> Notification:
    """Record the leader's decision on an approval request.

    Args:
        notification: Pending approval request.
        outcome: ``APPROVED`` or ``REJECTED``.
        approver: Leader who decided.

    Returns:
        Updated Notification instance.

    Raises:
        ValueError: If the outcome is not a decision.
        InvalidTransitionError: If the notification is not pending.
    """
    if outcome not in {ActionStatus.APPROVED, ActionStatus.REJECTED}:
        raise ValueError(f'Unsupported outcome: {outcome}')

    if notification.action_status != ActionStatus.PENDING:
        raise InvalidTransitionError(
            status=str(notification.action_status),
            action='resolve',
        )

    notification.action_status = outcome
    notification.approver = approver
    notification.resolved_at = timezone.now()
    notification.save(update_fields=['action_status', 'approver', 'resolved_at'])

    logger.info(
        'Notification %d %s by %s',
        notification.pk,
        outcome,
        approver.username,
    )
    return notification


def resolve_pending_for_file(
    team: Team,
    file_instance: File,
    outcome: ActionStatus,
    approver: _User,
) -> int:
    """Resolve every pending approval request about a file.

    Must run before the file is deleted, while requests still point at it.

    Returns:
        Number of resolved notifications.
    """
    pending = Notification.objects.select_for_update().filter(
        team=team,
        related_file=file_instance,
        action_status=ActionStatus.PENDING,
    )
    resolved = 0
    for notification in pending:
        resolve(notification, outcome, approver)
        resolved += 1
    return resolved


def mark_read(team: Team, notification_id: int, user: _User) -> Notification:
    """Mark one of the user's notifications as read.

    Reading never approves or rejects anything.

    Raises:
        Notification.DoesNotExist: If the notification isn't the user's.
    """
    notification = Notification.objects.get(
        pk=notification_id,
        team=team,
        recipient=user,
    )
    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])
    return notification


def mark_all_read(team: Team, user: _User) -> int:
    """Mark all of the user's notifications in the team as read.

    Returns:
        Number of notifications updated.
    """
    with transaction.atomic():
        updated = Notification.objects.filter(
            team=team,
            recipient=user,
            read=False,
        ).update(read=True)

    logger.debug(
        'Marked %d notifications read for %s in team %s',
        updated,
        user.username,
        team.name,
    )
    return updated


def unread_count(team: Team, user: _User) -> int:
    """Count the user's unread notifications in the team."""
    return Notification.objects.filter(
        team=team,
        recipient=user,
        read=False,
    ).count()


def list_notifications(team: Team, user: _User) -> list[NotificationSnapshot]:
    """List the user's notifications in the team, newest first.

    Args:
        team: Team scope.
        user: Recipient.

    Returns:
        Snapshots of the notifications.
    """
    notifications = Notification.objects.filter(
        team=team,
        recipient=user,
    ).select_related('initiated_by', 'approver')

    return [
        NotificationSnapshot(
            id=notification.pk,
            message=notification.message,
            file_id=notification.related_file_id,
            file_name=notification.file_name,
            change_type=notification.change_type,
            initiated_by=(
                notification.initiated_by.username
                if notification.initiated_by else None
            ),
            requires_approval=notification.requires_approval,
            action_status=notification.action_status,
            approver=notification.approver.username if notification.approver else None,
            read=notification.read,
            created_at=notification.created_at,
        )
        for notification in notifications
    ]
