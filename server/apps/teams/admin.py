"""Django admin configuration for teams app."""

from typing import Any

from django import forms
from django.contrib import admin
from django.core.exceptions import ValidationError
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.teams.models import Team


class TeamAdminForm(forms.ModelForm[Team]):
    """Team form that keeps the leader among the members."""

    class Meta:
        """Form metadata."""

        model = Team
        fields = '__all__'

    def clean_members(self) -> QuerySet[Any]:
        """Refuse a member list without the leader.

        Raises:
            ValidationError: If the leader was removed.
        """
        members = self.cleaned_data['members']
        leader_id = self.instance.leader_id
        if leader_id is not None and not members.filter(pk=leader_id).exists():
            raise ValidationError('The team leader cannot be removed')
        return members


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin[Team]):
    """Admin interface for Team model.

    Teams are created with ``create_team`` so that their nodes exist;
    here only the name and members can change.
    """

    form = TeamAdminForm

    list_display = [
        'name',
        'leader',
        'member_count',
        'node_count',
        'created_at',
    ]

    search_fields = [
        'name',
        'leader__username',
    ]

    filter_horizontal = ['members']

    readonly_fields = ['leader', 'created_at']

    def member_count(self, obj: Team) -> int:
        """Count of team members."""
        return obj.members.count()
    member_count.short_description = 'Members'  # type: ignore[attr-defined]

    def node_count(self, obj: Team) -> int:
        """Count of storage nodes owned by the team."""
        return obj.nodes.count()
    node_count.short_description = 'Nodes'  # type: ignore[attr-defined]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Teams are created together with their nodes."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[Team]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('leader')
