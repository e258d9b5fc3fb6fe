"""Tests for team operations business logic."""

import pytest
from django.core.exceptions import ValidationError

from server.apps.files.exceptions import AuthorizationError
from server.apps.nodes.models import NodeRole, StorageNode
from server.apps.teams.logic.team_operations import (
    add_member,
    create_team,
    get_team,
    is_leader,
    is_member,
    list_teams,
    remove_member,
)
from server.apps.teams.models import Team


@pytest.mark.django_db
class TestCreateTeam:
    """Tests for create_team function."""

    def test_create_team_adds_leader_as_member(self, leader):
        """Test the leader becomes the first member."""
        team = create_team('alpha', leader, backup_count=0, node_capacity=500)

        assert team.leader == leader
        assert list(team.members.all()) == [leader]

    def test_create_team_provisions_nodes(self, leader):
        """Test one primary and the requested backups are created."""
        team = create_team('alpha', leader, backup_count=2, node_capacity=500)

        nodes = StorageNode.objects.filter(team=team)
        assert nodes.count() == 3
        assert nodes.filter(role=NodeRole.PRIMARY).count() == 1
        assert nodes.filter(role=NodeRole.BACKUP).count() == 2
        for node in nodes:
            assert node.total_storage == 500
            assert node.used_storage == 0
            assert node.available_storage == 500
            assert node.file_count == 0

    def test_create_team_node_names(self, leader):
        """Test nodes are named after the team."""
        team = create_team('alpha', leader, backup_count=1, node_capacity=500)

        names = set(team.nodes.values_list('name', flat=True))
        assert names == {'alpha-primary', 'alpha-backup-1'}

    def test_create_team_uses_settings_defaults(self, leader, settings):
        """Test backup count and capacity fall back to settings."""
        settings.NODE_DEFAULT_BACKUP_COUNT = 1
        settings.NODE_DEFAULT_CAPACITY_BYTES = 2048

        team = create_team('alpha', leader)

        assert team.nodes.count() == 2
        assert set(team.nodes.values_list('total_storage', flat=True)) == {2048}

    @pytest.mark.parametrize('backup_count', [-1, 3])
    def test_create_team_rejects_backup_count(self, leader, backup_count):
        """Test backup count must stay between 0 and 2."""
        with pytest.raises(ValidationError):
            create_team('alpha', leader, backup_count=backup_count, node_capacity=500)

        assert not Team.objects.filter(name='alpha').exists()

    def test_create_team_rejects_negative_capacity(self, leader):
        """Test node capacity cannot be negative."""
        with pytest.raises(ValidationError):
            create_team('alpha', leader, backup_count=0, node_capacity=-1)


@pytest.mark.django_db
class TestMembership:
    """Tests for member management."""

    def test_add_member(self, team, outsider, leader):
        """Test the leader can add members."""
        add_member(team, leader, outsider)

        assert is_member(team, outsider)

    def test_add_member_requires_leader(self, team, member, outsider):
        """Test members cannot add other users."""
        with pytest.raises(AuthorizationError):
            add_member(team, member, outsider)

        assert not is_member(team, outsider)

    def test_remove_member(self, team, leader, member):
        """Test the leader can remove members."""
        remove_member(team, leader, member)

        assert not is_member(team, member)

    def test_remove_leader_fails(self, team, leader):
        """Test the leader cannot be removed."""
        with pytest.raises(ValidationError):
            remove_member(team, leader, leader)

        assert is_member(team, leader)

    def test_is_leader(self, team, leader, member):
        """Test leader detection."""
        assert is_leader(team, leader) is True
        assert is_leader(team, member) is False


@pytest.mark.django_db
class TestTeamLookup:
    """Tests for team queries."""

    def test_list_teams_only_returns_memberships(self, team, member, outsider, leader):
        """Test users only see teams they belong to."""
        create_team('beta', outsider, backup_count=0, node_capacity=100)

        assert list(list_teams(member)) == [team]
        assert [t.name for t in list_teams(outsider)] == ['beta']

    def test_get_team_for_member(self, team, member):
        """Test members can load their team."""
        assert get_team(team.pk, member) == team

    def test_get_team_for_outsider(self, team, outsider):
        """Test outsiders cannot load the team."""
        with pytest.raises(AuthorizationError):
            get_team(team.pk, outsider)

    def test_get_team_not_found(self, member):
        """Test missing teams raise DoesNotExist."""
        with pytest.raises(Team.DoesNotExist):
            get_team(99999, member)
