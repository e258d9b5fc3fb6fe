"""Database models for teams app."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models

_TEAM_NAME_MAX_LENGTH: Final = 100


@final
class Team(models.Model):
    """Group of users sharing one set of storage nodes.

    Every file, node and notification belongs to exactly one team, and
    every lookup in the logic layer is keyed by it. The leader is always
    part of ``members``.
    """

    name = models.CharField(
        max_length=_TEAM_NAME_MAX_LENGTH,
        unique=True,
    )

    leader = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='led_teams',
        help_text='Member allowed to approve or reject pending changes',
    )

    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='teams',
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Team'  # type: ignore[mutable-override]
        verbose_name_plural = 'Teams'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['name']

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.name
