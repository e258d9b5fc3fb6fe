"""Status transitions of a file and the role each one requires.

The table below is the only place that knows which action is valid from
which status. A file is looked up by ``(status, change_type, action)``;
rows with ``change_type=None`` apply to any change type.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final

from server.apps.files.exceptions import AuthorizationError, InvalidTransitionError
from server.apps.files.models import ChangeType, File, FileStatus
from server.apps.teams.logic.team_operations import is_leader, require_member
from server.apps.teams.models import Team

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


class Action(StrEnum):
    """User actions that move a file through the workflow."""

    CREATE = 'create'
    EDIT = 'edit'
    REQUEST_DELETE = 'request_delete'
    CONFIRM = 'confirm'
    APPROVE = 'approve'
    REJECT = 'reject'


class Role(StrEnum):
    """Who may trigger a transition."""

    MEMBER = 'member'
    OWNER = 'owner'
    LEADER = 'leader'


@dataclass(frozen=True, slots=True)
class Transition:
    """Target of a valid action.

    ``target`` is None when the action removes the file record.
    """

    target: FileStatus | None
    role: Role

    @property
    def removes_file(self) -> bool:
        """Whether the file record is deleted by this transition."""
        return self.target in {None, FileStatus.REJECTED}


_TRANSITIONS: Final[dict[tuple[FileStatus, ChangeType | None, Action], Transition]] = {
    (FileStatus.SYNCED, None, Action.EDIT): Transition(
        FileStatus.PENDING_CONFIRMATION,
        Role.OWNER,
    ),
    (FileStatus.SYNCED, None, Action.REQUEST_DELETE): Transition(
        FileStatus.PENDING_DELETE,
        Role.OWNER,
    ),
    (FileStatus.PENDING_CONFIRMATION, None, Action.CONFIRM): Transition(
        FileStatus.PENDING_APPROVAL,
        Role.OWNER,
    ),
    (FileStatus.PENDING_APPROVAL, ChangeType.CREATE, Action.APPROVE): Transition(
        FileStatus.SYNCED,
        Role.LEADER,
    ),
    (FileStatus.PENDING_APPROVAL, ChangeType.EDIT, Action.APPROVE): Transition(
        FileStatus.SYNCED,
        Role.LEADER,
    ),
    (FileStatus.PENDING_APPROVAL, ChangeType.CREATE, Action.REJECT): Transition(
        FileStatus.REJECTED,
        Role.LEADER,
    ),
    (FileStatus.PENDING_APPROVAL, ChangeType.EDIT, Action.REJECT): Transition(
        FileStatus.SYNCED,
        Role.LEADER,
    ),
    (FileStatus.PENDING_DELETE, None, Action.APPROVE): Transition(
        None,
        Role.LEADER,
    ),
    (FileStatus.PENDING_DELETE, None, Action.REJECT): Transition(
        FileStatus.SYNCED,
        Role.LEADER,
    ),
}

INITIAL_STATUS: Final = FileStatus.PENDING_CONFIRMATION


def plan_transition(file_instance: File, action: Action) -> Transition:
    """Find the transition an action triggers on a file.

    Args:
        file_instance: File in its current state.
        action: Requested action.

    Returns:
        Transition describing the target status and required role.

    Raises:
        InvalidTransitionError: If the action is not valid from the
            file's current status.
    """
    status = FileStatus(file_instance.status)
    change_type = ChangeType(file_instance.change_type)

    transition = _TRANSITIONS.get(
        (status, change_type, action),
    ) or _TRANSITIONS.get(
        (status, None, action),
    )
    if transition is None:
        logger.warning(
            'Rejected %s on file %d: status is %s (%s)',
            action,
            file_instance.pk,
            status,
            change_type,
        )
        raise InvalidTransitionError(status=status, action=action)
    return transition


def authorize(
    team: Team,
    actor: _User,
    role: Role,
    file_instance: File | None = None,
) -> None:
    """Check that the actor holds the role a transition requires.

    Every role implies team membership. ``OWNER`` means the member who
    uploaded the file.

    Raises:
        AuthorizationError: If the actor lacks the role.
    """
    require_member(team, actor)

    if role == Role.LEADER and not is_leader(team, actor):
        logger.warning(
            'User %s tried a leader action in team %s',
            actor.username,
            team.name,
        )
        raise AuthorizationError(
            f'Only the leader of team {team.name} can approve or reject changes',
        )

    if role == Role.OWNER:
        owner_id = file_instance.owner_id if file_instance else None
        if owner_id != actor.pk:
            logger.warning(
                'User %s tried to change a file they do not own',
                actor.username,
            )
            raise AuthorizationError(
                'Only the owner of a file can change or confirm it',
            )
