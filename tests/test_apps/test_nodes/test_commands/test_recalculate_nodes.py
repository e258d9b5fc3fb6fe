"""Tests for recalculate_nodes management command."""

from io import StringIO

import pytest
from django.core.management import call_command

from server.apps.files.logic.workflow import approve_change, confirm_change, create_file
from server.apps.nodes.models import StorageNode


def _drift(node, used):
    StorageNode.objects.filter(pk=node.pk).update(
        used_storage=used,
        available_storage=node.total_storage - used,
    )


@pytest.mark.django_db
class TestRecalculateNodesCommand:
    """Tests for recalculate_nodes management command."""

    @pytest.fixture
    def synced(self, team, member, leader):
        """Sync one 100-byte file to all nodes."""
        result = create_file(team, member, 'notes.txt', 'x' * 100)
        confirm_change(team, result.file_id, member)
        approve_change(team, result.file_id, leader)

    def test_repairs_drifted_nodes(self, synced, primary_node, backup_nodes):
        """Test drifted counters are rebuilt from files."""
        _drift(primary_node, 500)

        out = StringIO()
        call_command('recalculate_nodes', stdout=out)

        primary_node.refresh_from_db()
        assert primary_node.used_storage == 100
        assert primary_node.available_storage == 900
        assert (
            'Updated alpha-primary: 500 bytes in 1 files -> 100 bytes in 1 files'
            in out.getvalue()
        )
        assert 'Updated 1 nodes, 0 failed' in out.getvalue()

    def test_repairs_file_count_only_drift(self, synced, backup_nodes):
        """Test a node whose file count alone drifted is repaired."""
        StorageNode.objects.filter(pk=backup_nodes[0].pk).update(file_count=4)

        out = StringIO()
        call_command('recalculate_nodes', stdout=out)

        backup_nodes[0].refresh_from_db()
        assert backup_nodes[0].file_count == 1
        assert backup_nodes[0].used_storage == 100
        assert (
            'Updated alpha-backup-1: 100 bytes in 4 files -> 100 bytes in 1 files'
            in out.getvalue()
        )
        assert 'Updated 1 nodes, 0 failed' in out.getvalue()

    def test_dry_run_reports_file_count_drift(self, synced, backup_nodes):
        """Test dry run notices a drifted file count."""
        StorageNode.objects.filter(pk=backup_nodes[1].pk).update(file_count=0)

        out = StringIO()
        call_command('recalculate_nodes', '--dry-run', stdout=out)

        assert 'Would update 1 nodes' in out.getvalue()

    def test_dry_run(self, synced, primary_node):
        """Test dry run reports without saving."""
        _drift(primary_node, 500)

        out = StringIO()
        call_command('recalculate_nodes', '--dry-run', stdout=out)

        primary_node.refresh_from_db()
        assert primary_node.used_storage == 500
        assert (
            'Would update alpha-primary: 500 bytes in 1 files -> 100 bytes in 1 files'
            in out.getvalue()
        )
        assert 'Would update 1 nodes' in out.getvalue()

    def test_team_filter(self, synced, primary_node):
        """Test only nodes of the named team are touched."""
        _drift(primary_node, 500)

        out = StringIO()
        call_command('recalculate_nodes', '--team', 'beta', stdout=out)

        primary_node.refresh_from_db()
        assert primary_node.used_storage == 500
        assert 'Updated 0 nodes, 0 failed' in out.getvalue()

    def test_reports_failures(self, synced, primary_node):
        """Test nodes whose files exceed capacity are reported."""
        StorageNode.objects.filter(pk=primary_node.pk).update(
            total_storage=50,
            used_storage=0,
            available_storage=50,
        )

        out = StringIO()
        err = StringIO()
        call_command('recalculate_nodes', stdout=out, stderr=err)

        assert 'Failed to recalculate alpha-primary' in err.getvalue()
        assert 'Updated 0 nodes, 1 failed' in out.getvalue()
