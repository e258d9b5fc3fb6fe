"""Management command to rebuild node counters from team files."""

import logging
from typing import Any

from django.core.management.base import BaseCommand

from server.apps.files.exceptions import CapacityError
from server.apps.nodes.logic.node_ledger import calculate_usage, recalculate_usage
from server.apps.nodes.models import StorageNode

logger = logging.getLogger(__name__)


def _describe(counters: tuple[int, int]) -> str:
    used, file_count = counters
    return f'{used} bytes in {file_count} files'


class Command(BaseCommand):
    """Recalculate used storage and file counts of storage nodes."""

    help = 'Recalculate node counters from the files that reference them'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show counters that would change without saving them',
        )
        parser.add_argument(
            '--team',
            help='Only recalculate nodes of the team with this name',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the recalculation.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        team_name = options['team']

        nodes = StorageNode.objects.select_related('team').order_by('team', 'name')
        if team_name:
            nodes = nodes.filter(team__name=team_name)

        changed = 0
        failed = 0

        for node in nodes:
            old_counters = (node.used_storage, node.file_count)

            if dry_run:
                expected = calculate_usage(node)
                if expected != old_counters:
                    self.stdout.write(
                        f'Would update {node.name}: '
                        f'{_describe(old_counters)} -> {_describe(expected)}',
                    )
                    changed += 1
                continue

            try:
                recalculate_usage(node)
            except CapacityError as exc:
                self.stderr.write(f'Failed to recalculate {node.name}: {exc}')
                logger.exception('Failed to recalculate node: %s', node.name)
                failed += 1
                continue

            new_counters = (node.used_storage, node.file_count)
            if new_counters != old_counters:
                self.stdout.write(
                    f'Updated {node.name}: '
                    f'{_describe(old_counters)} -> {_describe(new_counters)}',
                )
                changed += 1

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would update {changed} nodes'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Updated {changed} nodes, {failed} failed',
                ),
            )
