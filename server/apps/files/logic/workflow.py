"""Approval workflow for team files.

Each public function is one user action. It runs in a single
``transaction.atomic()`` block that covers the file row, the node
counters and the notifications, so a failure at any step leaves all
three untouched.

Files are loaded with ``select_for_update`` and written back with a
compare-and-swap on ``version``. Callers that pass ``expected_version``
(the version they displayed to the user) get ``ConflictError`` when
somebody else changed the file in between.
"""

import logging
from dataclasses import dataclass
from typing import Any

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F  # noqa: WPS347
from django.utils import timezone

from server.apps.files.exceptions import ConflictError
from server.apps.files.infrastructure.metadata import (
    calculate_size,
    detect_mime_type,
    validate_file_name,
    validate_size,
)
from server.apps.files.logic.lifecycle import (
    INITIAL_STATUS,
    Action,
    Role,
    Transition,
    authorize,
    plan_transition,
)
from server.apps.files.models import ChangeType, File, FileStatus
from server.apps.nodes.logic import node_ledger
from server.apps.notifications.logic.notification_ledger import (
    WorkflowEvent,
    raise_event,
    resolve_pending_for_file,
)
from server.apps.notifications.models import ActionStatus
from server.apps.teams.models import Team

# User type for Django's dynamic user model
_User = Any

_CHANGE_VERBS = {
    ChangeType.CREATE: 'upload',
    ChangeType.EDIT: 'edit',
    ChangeType.DELETE: 'deletion',
}

_PREVIOUS_FIELDS = (
    'previous_content',
    'previous_name',
    'previous_size',
    'previous_type',
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WorkflowResult:
    """Outcome of one workflow action.

    ``version`` is None when the action deleted the file.
    """

    action: Action
    file_id: int
    status: FileStatus | None
    version: int | None

    @property
    def deleted(self) -> bool:
        """Whether the file record no longer exists."""
        return self.version is None


def _lock_file(team: Team, file_id: int, expected_version: int | None) -> File:
    """Load a team file for update and check the caller's version.

    Raises:
        File.DoesNotExist: If the team has no such file.
        ConflictError: If the stored version differs from the expected one.
    """
    file_instance = File.objects.select_for_update().select_related(
        'primary_node',
    ).get(team=team, pk=file_id)

    if expected_version is not None and file_instance.version != expected_version:
        logger.warning(
            'Stale action on file %d: expected version %d, found %d',
            file_id,
            expected_version,
            file_instance.version,
        )
        raise ConflictError(
            file_id=file_id,
            expected_version=expected_version,
            actual_version=file_instance.version,
        )
    return file_instance


def _begin(
    team: Team,
    file_id: int,
    actor: _User,
    action: Action,
    expected_version: int | None,
) -> tuple[File, Transition]:
    """Load the file and validate the action against status and role."""
    file_instance = _lock_file(team, file_id, expected_version)
    transition = plan_transition(file_instance, action)
    authorize(team, actor, transition.role, file_instance)
    return file_instance, transition


def _save_file(file_instance: File, fields: tuple[str, ...]) -> None:
    """Write changed fields if nobody else bumped the version meanwhile.

    Raises:
        ConflictError: If the stored version moved since the file was read.
    """
    current_version = file_instance.version
    changes = {field: getattr(file_instance, field) for field in fields}
    now = timezone.now()

    updated = File.objects.filter(
        pk=file_instance.pk,
        version=current_version,
    ).update(
        **changes,
        version=F('version') + 1,
        last_modified_at=now,
    )

    if updated == 0:
        actual_version = File.objects.filter(
            pk=file_instance.pk,
        ).values_list('version', flat=True).first()
        logger.warning(
            'Concurrent write on file %d: expected version %d, found %s',
            file_instance.pk,
            current_version,
            actual_version,
        )
        raise ConflictError(
            file_id=file_instance.pk,
            expected_version=current_version,
            actual_version=actual_version,
        )

    file_instance.version = current_version + 1
    file_instance.last_modified_at = now


def _clear_previous(file_instance: File) -> None:
    for field in _PREVIOUS_FIELDS:
        setattr(file_instance, field, None)


def _notify_leader(team: Team, file_instance: File, actor: _User, message: str) -> None:
    raise_event(WorkflowEvent(
        team=team,
        recipient=team.leader,
        message=message,
        related_file=file_instance,
        change_type=file_instance.change_type,
        initiated_by=actor,
        needs_leader_action=True,
    ))


def _notify_initiator(team: Team, file_instance: File, leader: _User, message: str) -> None:
    initiator = file_instance.last_modified_by
    if initiator is None:
        return
    raise_event(WorkflowEvent(
        team=team,
        recipient=initiator,
        message=message,
        related_file=file_instance,
        change_type=file_instance.change_type,
        initiated_by=leader,
    ))


def _remove_file(file_instance: File) -> None:
    file_id = file_instance.pk
    file_instance.delete()
    logger.info('File record deleted: ID=%d', file_id)


def _result(action: Action, file_instance: File) -> WorkflowResult:
    return WorkflowResult(
        action=action,
        file_id=file_instance.pk,
        status=FileStatus(file_instance.status),
        version=file_instance.version,
    )


def create_file(
    team: Team,
    actor: _User,
    name: str,
    content: str,
    file_type: str | None = None,
    size: int | None = None,
) -> WorkflowResult:
    """Upload a new file to the team's primary node.

    The size is reserved on the primary node right away; replicas are
    only written once the leader approves.

    Args:
        team: Team receiving the file.
        actor: Member uploading the file.
        name: File name.
        content: Decoded file content.
        file_type: Declared MIME type, guessed from the name if None.
        size: Declared size in bytes, measured from content if None.

    Returns:
        WorkflowResult with status ``pending_confirmation``.

    Raises:
        AuthorizationError: If the actor is not a team member.
        ValidationError: If name or size is invalid.
        CapacityError: If the primary node is full.
    """
    validate_file_name(name)
    if size is None:
        size = calculate_size(content)
    validate_size(size)

    with transaction.atomic():
        authorize(team, actor, Role.MEMBER)

        primary_node = node_ledger.get_primary_node(team)
        node_ledger.reserve(primary_node, size)

        file_instance = File.objects.create(
            team=team,
            owner=actor,
            name=name,
            file_type=file_type or detect_mime_type(name),
            size=size,
            content=content,
            primary_node=primary_node,
            status=INITIAL_STATUS,
            change_type=ChangeType.CREATE,
            last_modified_by=actor,
        )

    logger.info(
        'File created: %s (ID: %d, size: %d) by %s in team %s',
        name,
        file_instance.pk,
        size,
        actor.username,
        team.name,
    )
    return _result(Action.CREATE, file_instance)


def edit_file(
    team: Team,
    file_id: int,
    actor: _User,
    *,
    content: str | None = None,
    name: str | None = None,
    file_type: str | None = None,
    expected_version: int | None = None,
) -> WorkflowResult:
    """Propose new content and/or name for a synced file.

    The approved version is kept in ``previous_*`` fields. Node counters
    stay as they are until the leader approves.

    Returns:
        WorkflowResult with status ``pending_confirmation``.

    Raises:
        ValidationError: If neither content nor name is given, or the
            new name is invalid.
        InvalidTransitionError: If the file is not synced.
        AuthorizationError: If the actor is not a team member.
        ConflictError: If the file changed since ``expected_version``.
    """
    if content is None and name is None:
        raise ValidationError('Nothing to change: give new content or name')
    if name is not None:
        validate_file_name(name)

    with transaction.atomic():
        file_instance, transition = _begin(
            team, file_id, actor, Action.EDIT, expected_version,
        )

        file_instance.previous_content = file_instance.content
        file_instance.previous_name = file_instance.name
        file_instance.previous_size = file_instance.size
        file_instance.previous_type = file_instance.file_type

        if name is not None:
            file_instance.name = name
        if content is not None:
            file_instance.content = content
            file_instance.size = calculate_size(content)
        if file_type is not None:
            file_instance.file_type = file_type
        elif name is not None:
            file_instance.file_type = detect_mime_type(name)

        file_instance.status = transition.target
        file_instance.change_type = ChangeType.EDIT
        file_instance.last_modified_by = actor

        _save_file(file_instance, (
            'name',
            'content',
            'size',
            'file_type',
            'status',
            'change_type',
            'last_modified_by',
            *_PREVIOUS_FIELDS,
        ))

    logger.info(
        'File edited: %s (ID: %d) by %s, awaiting confirmation',
        file_instance.name,
        file_id,
        actor.username,
    )
    return _result(Action.EDIT, file_instance)


def request_delete(
    team: Team,
    file_id: int,
    actor: _User,
    *,
    expected_version: int | None = None,
) -> WorkflowResult:
    """Ask the leader to delete a synced file.

    Returns:
        WorkflowResult with status ``pending_delete``.

    Raises:
        InvalidTransitionError: If the file is not synced.
        AuthorizationError: If the actor is not a team member.
        ConflictError: If the file changed since ``expected_version``.
    """
    with transaction.atomic():
        file_instance, transition = _begin(
            team, file_id, actor, Action.REQUEST_DELETE, expected_version,
        )

        file_instance.status = transition.target
        file_instance.change_type = ChangeType.DELETE
        file_instance.last_modified_by = actor
        _save_file(file_instance, ('status', 'change_type', 'last_modified_by'))

        _notify_leader(
            team,
            file_instance,
            actor,
            f'{actor.username} requested deletion of "{file_instance.name}"',
        )

    logger.info(
        'Delete requested: %s (ID: %d) by %s',
        file_instance.name,
        file_id,
        actor.username,
    )
    return _result(Action.REQUEST_DELETE, file_instance)


def confirm_change(
    team: Team,
    file_id: int,
    actor: _User,
    *,
    expected_version: int | None = None,
) -> WorkflowResult:
    """Confirm a pending create or edit and send it to the leader.

    Returns:
        WorkflowResult with status ``pending_approval``.

    Raises:
        InvalidTransitionError: If the file is not pending confirmation.
        AuthorizationError: If the actor didn't start the change.
        ConflictError: If the file changed since ``expected_version``.
    """
    with transaction.atomic():
        file_instance, transition = _begin(
            team, file_id, actor, Action.CONFIRM, expected_version,
        )

        file_instance.status = transition.target
        _save_file(file_instance, ('status',))

        verb = _CHANGE_VERBS[ChangeType(file_instance.change_type)]
        _notify_leader(
            team,
            file_instance,
            actor,
            f'{actor.username} requests approval to {verb} "{file_instance.name}"',
        )

    logger.info(
        'Change confirmed: %s (ID: %d, %s) by %s',
        file_instance.name,
        file_id,
        file_instance.change_type,
        actor.username,
    )
    return _result(Action.CONFIRM, file_instance)


def _approve_create(team: Team, file_instance: File) -> None:
    backups = node_ledger.get_backup_nodes(team)
    for backup in backups:
        node_ledger.sync_to_replica(backup, file_instance.size)
    file_instance.replica_nodes.set(backups)


def _approve_edit(file_instance: File) -> None:
    old_size = file_instance.previous_size
    if old_size is None:
        old_size = file_instance.size
    new_size = file_instance.size

    node_ledger.adjust(file_instance.primary_node, old_size, new_size)
    for replica in file_instance.replica_nodes.all():
        node_ledger.adjust(replica, old_size, new_size)


def _approve_delete(file_instance: File) -> None:
    node_ledger.release(file_instance.primary_node, file_instance.size)
    for replica in file_instance.replica_nodes.all():
        node_ledger.release(replica, file_instance.size)


def approve_change(
    team: Team,
    file_id: int,
    actor: _User,
    *,
    expected_version: int | None = None,
) -> WorkflowResult:
    """Approve a pending change as team leader.

    Creates are synced to every backup node, edits move node counters by
    their size difference, deletes release the file from the primary
    and every replica and remove the record.

    Returns:
        WorkflowResult, ``synced`` or deleted.

    Raises:
        InvalidTransitionError: If nothing is pending approval.
        AuthorizationError: If the actor is not the leader.
        ConflictError: If the file changed since ``expected_version``.
        CapacityError: If a node cannot hold the approved change.
    """
    with transaction.atomic():
        file_instance, transition = _begin(
            team, file_id, actor, Action.APPROVE, expected_version,
        )
        change_type = ChangeType(file_instance.change_type)

        resolve_pending_for_file(team, file_instance, ActionStatus.APPROVED, actor)
        _notify_initiator(
            team,
            file_instance,
            actor,
            f'Your {_CHANGE_VERBS[change_type]} of "{file_instance.name}" was approved',
        )

        if transition.removes_file:
            _approve_delete(file_instance)
            _remove_file(file_instance)
            result = WorkflowResult(
                action=Action.APPROVE,
                file_id=file_id,
                status=None,
                version=None,
            )
        else:
            if change_type == ChangeType.CREATE:
                _approve_create(team, file_instance)
            else:
                _approve_edit(file_instance)

            file_instance.status = transition.target
            _clear_previous(file_instance)
            _save_file(file_instance, ('status', *_PREVIOUS_FIELDS))
            result = _result(Action.APPROVE, file_instance)

    logger.info(
        'Change approved: file %d (%s) by %s',
        file_id,
        change_type,
        actor.username,
    )
    return result


def reject_change(
    team: Team,
    file_id: int,
    actor: _User,
    *,
    expected_version: int | None = None,
) -> WorkflowResult:
    """Reject a pending change as team leader.

    A rejected create releases its reservation and removes the file, a
    rejected edit restores the previous version, a rejected delete keeps
    the file synced. Only a rejected create touches node counters.

    Returns:
        WorkflowResult, ``synced`` or ``rejected`` (deleted).

    Raises:
        InvalidTransitionError: If nothing is pending approval.
        AuthorizationError: If the actor is not the leader.
        ConflictError: If the file changed since ``expected_version``.
    """
    with transaction.atomic():
        file_instance, transition = _begin(
            team, file_id, actor, Action.REJECT, expected_version,
        )
        change_type = ChangeType(file_instance.change_type)

        resolve_pending_for_file(team, file_instance, ActionStatus.REJECTED, actor)
        _notify_initiator(
            team,
            file_instance,
            actor,
            f'Your {_CHANGE_VERBS[change_type]} of "{file_instance.name}" was rejected',
        )

        if transition.removes_file:
            node_ledger.release(file_instance.primary_node, file_instance.size)
            _remove_file(file_instance)
            result = WorkflowResult(
                action=Action.REJECT,
                file_id=file_id,
                status=transition.target,
                version=None,
            )
        else:
            if change_type == ChangeType.EDIT:
                file_instance.content = file_instance.previous_content or ''
                file_instance.name = file_instance.previous_name or file_instance.name
                if file_instance.previous_size is not None:
                    file_instance.size = file_instance.previous_size
                file_instance.file_type = (
                    file_instance.previous_type or file_instance.file_type
                )
                _clear_previous(file_instance)

            file_instance.status = transition.target
            _save_file(file_instance, (
                'status',
                'content',
                'name',
                'size',
                'file_type',
                *_PREVIOUS_FIELDS,
            ))
            result = _result(Action.REJECT, file_instance)

    logger.info(
        'Change rejected: file %d (%s) by %s',
        file_id,
        change_type,
        actor.username,
    )
    return result
