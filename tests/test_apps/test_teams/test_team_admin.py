"""Tests for the team admin."""

import pytest
from django.contrib import admin

from server.apps.teams.models import Team


@pytest.fixture
def team_admin():
    """Registered TeamAdmin instance."""
    return admin.site._registry[Team]  # noqa: WPS437


@pytest.fixture
def admin_request(rf, admin_user):
    """GET request made by a superuser."""
    request = rf.get('/admin/teams/team/')
    request.user = admin_user
    return request


@pytest.mark.django_db
class TestTeamAdmin:
    """Tests for TeamAdmin permissions and validation."""

    def test_add_disabled(self, team_admin, admin_request):
        """Test teams cannot be added without their nodes."""
        assert team_admin.has_add_permission(admin_request) is False

    def test_leader_read_only(self, team_admin, admin_request, team):
        """Test the leader cannot be changed from the admin."""
        assert 'leader' in team_admin.get_readonly_fields(admin_request, team)

        form_class = team_admin.get_form(admin_request, team)
        assert 'leader' not in form_class.base_fields

    def test_removing_leader_refused(self, team_admin, admin_request, team, member):
        """Test a member list without the leader is invalid."""
        form_class = team_admin.get_form(admin_request, team)
        form = form_class(
            data={'name': team.name, 'members': [member.pk]},
            instance=team,
        )

        assert not form.is_valid()
        assert 'members' in form.errors
        assert team.members.count() == 3

    def test_members_can_change(self, team_admin, admin_request, team, leader, member):
        """Test other members can be removed as long as the leader stays."""
        form_class = team_admin.get_form(admin_request, team)
        form = form_class(
            data={'name': team.name, 'members': [leader.pk, member.pk]},
            instance=team,
        )

        assert form.is_valid(), form.errors
        form.save()

        assert set(team.members.all()) == {leader, member}
