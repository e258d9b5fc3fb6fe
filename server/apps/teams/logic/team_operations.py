"""Business logic for teams and membership."""

import logging
from typing import Any

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import AuthorizationError
from server.apps.nodes.logic.node_ledger import (
    MAX_BACKUP_NODES,
    get_default_backup_count,
    get_default_capacity,
    provision_nodes,
)
from server.apps.teams.models import Team

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def is_member(team: Team, user: _User) -> bool:
    """Check whether the user belongs to the team."""
    return team.members.filter(pk=user.pk).exists()


def is_leader(team: Team, user: _User) -> bool:
    """Check whether the user leads the team."""
    return team.leader_id == user.pk


def require_member(team: Team, user: _User) -> None:
    """Ensure the user belongs to the team.

    Raises:
        AuthorizationError: If the user is not a member.
    """
    if not is_member(team, user):
        logger.warning(
            'User %s is not a member of team %s',
            user.username,
            team.name,
        )
        raise AuthorizationError(
            f'{user.username} is not a member of team {team.name}',
        )


def require_leader(team: Team, user: _User) -> None:
    """Ensure the user is the team leader.

    Raises:
        AuthorizationError: If the user does not lead the team.
    """
    if not is_leader(team, user):
        logger.warning(
            'User %s is not the leader of team %s',
            user.username,
            team.name,
        )
        raise AuthorizationError(
            f'Only the leader of team {team.name} can do this',
        )


def create_team(
    name: str,
    leader: _User,
    backup_count: int | None = None,
    node_capacity: int | None = None,
) -> Team:
    """Create a team with its storage nodes.

    The leader becomes the first member. One primary node and
    ``backup_count`` backup nodes are provisioned in the same transaction.

    Args:
        name: Unique team name.
        leader: User leading the team.
        backup_count: Backup nodes to create (0-2), settings default if None.
        node_capacity: Capacity of each node in bytes, settings default if None.

    Returns:
        Created Team instance.

    Raises:
        ValidationError: If the backup count or capacity is out of range.
    """
    if backup_count is None:
        backup_count = get_default_backup_count()
    if node_capacity is None:
        node_capacity = get_default_capacity()

    if not 0 <= backup_count <= MAX_BACKUP_NODES:
        raise ValidationError(
            f'Backup count must be between 0 and {MAX_BACKUP_NODES}',
        )
    if node_capacity < 0:
        raise ValidationError('Node capacity cannot be negative')

    with transaction.atomic():
        team = Team.objects.create(name=name, leader=leader)
        team.members.add(leader)
        provision_nodes(team, node_capacity, backup_count)

    logger.info(
        'Team created: %s (leader: %s, backups: %d)',
        team.name,
        leader.username,
        backup_count,
    )
    return team


def add_member(team: Team, actor: _User, user: _User) -> None:
    """Add a user to the team.

    Args:
        team: Team to join.
        actor: User performing the change (must be the leader).
        user: User to add.

    Raises:
        AuthorizationError: If the actor is not the leader.
    """
    require_leader(team, actor)
    team.members.add(user)

    logger.info('User %s joined team %s', user.username, team.name)


def remove_member(team: Team, actor: _User, user: _User) -> None:
    """Remove a user from the team.

    Files the user owns stay with the team.

    Args:
        team: Team to leave.
        actor: User performing the change (must be the leader).
        user: User to remove.

    Raises:
        AuthorizationError: If the actor is not the leader.
        ValidationError: If the user is the leader.
    """
    require_leader(team, actor)
    if is_leader(team, user):
        raise ValidationError('The team leader cannot be removed')

    team.members.remove(user)

    logger.info('User %s left team %s', user.username, team.name)


def list_teams(user: _User) -> QuerySet[Team]:
    """List teams the user belongs to."""
    return Team.objects.filter(members=user).select_related('leader')


def get_team(team_id: int, user: _User) -> Team:
    """Get a team the user belongs to.

    Args:
        team_id: ID of the team.
        user: User asking for the team.

    Returns:
        Team instance.

    Raises:
        Team.DoesNotExist: If the team doesn't exist.
        AuthorizationError: If the user is not a member.
    """
    team = Team.objects.select_related('leader').get(pk=team_id)
    require_member(team, user)
    return team
