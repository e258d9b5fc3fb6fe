"""Tests for File model."""

import pytest
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError

from server.apps.files.models import ChangeType, File, FileStatus


def _make_file(team, member, primary_node, **kwargs):
    defaults = {
        'team': team,
        'owner': member,
        'name': 'test.txt',
        'file_type': 'text/plain',
        'size': 100,
        'content': 'x' * 100,
        'primary_node': primary_node,
        'last_modified_by': member,
    }
    defaults.update(kwargs)
    return File.objects.create(**defaults)


@pytest.mark.django_db
def test_file_model_str(team, member, primary_node):
    """Test File __str__ method."""
    file_instance = _make_file(team, member, primary_node)

    assert str(file_instance) == 'alpha:test.txt (pending_confirmation)'


@pytest.mark.django_db
def test_file_defaults(team, member, primary_node):
    """Test a new file starts as an unconfirmed create at version 1."""
    file_instance = _make_file(team, member, primary_node)

    assert file_instance.status == FileStatus.PENDING_CONFIRMATION
    assert file_instance.change_type == ChangeType.CREATE
    assert file_instance.version == 1
    assert file_instance.previous_content is None


@pytest.mark.django_db
def test_committed_size_of_pending_edit(team, member, primary_node):
    """Test a pending edit still accounts the previous size."""
    file_instance = _make_file(
        team,
        member,
        primary_node,
        size=300,
        previous_size=100,
        status=FileStatus.PENDING_APPROVAL,
        change_type=ChangeType.EDIT,
    )

    assert file_instance.has_pending_edit is True
    assert file_instance.committed_size == 100


@pytest.mark.django_db
def test_committed_size_of_synced_file(team, member, primary_node):
    """Test a synced file accounts its current size."""
    file_instance = _make_file(
        team,
        member,
        primary_node,
        status=FileStatus.SYNCED,
        change_type=ChangeType.EDIT,
    )

    assert file_instance.has_pending_edit is False
    assert file_instance.committed_size == 100


@pytest.mark.django_db
def test_negative_size_rejected(team, member, primary_node):
    """Test the database refuses negative sizes."""
    with pytest.raises(IntegrityError), transaction.atomic():
        _make_file(team, member, primary_node, size=-1)


@pytest.mark.django_db
def test_primary_node_protected(team, member, primary_node):
    """Test a node holding files cannot be deleted."""
    _make_file(team, member, primary_node)

    with pytest.raises(ProtectedError):
        primary_node.delete()
