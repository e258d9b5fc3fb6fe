"""Shared fixtures for app tests."""

import pytest
from django.contrib.auth import get_user_model

from server.apps.teams.logic.team_operations import add_member, create_team

User = get_user_model()


@pytest.fixture
def leader(db):
    """Create the user leading the test team.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='leader',
        password='testpass123',
        email='leader@example.com',
    )


@pytest.fixture
def member(db):
    """Create a regular team member.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='member',
        password='testpass123',
        email='member@example.com',
    )


@pytest.fixture
def other_member(db):
    """Create a second team member for concurrency tests.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='othermember',
        password='testpass123',
        email='othermember@example.com',
    )


@pytest.fixture
def outsider(db):
    """Create a user outside the team for isolation tests.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='outsider',
        password='testpass123',
        email='outsider@example.com',
    )


@pytest.fixture
def team(leader, member, other_member):
    """Create a team with 1000-byte nodes: one primary, two backups.

    Returns:
        Team instance with leader, member and other_member.
    """
    team = create_team(
        'alpha',
        leader,
        backup_count=2,
        node_capacity=1000,
    )
    add_member(team, leader, member)
    add_member(team, leader, other_member)
    return team


@pytest.fixture
def primary_node(team):
    """Primary node of the test team."""
    return team.nodes.get(role='primary')


@pytest.fixture
def backup_nodes(team):
    """Backup nodes of the test team, ordered by name."""
    return list(team.nodes.filter(role='backup').order_by('name'))
