"""Tests for notification business logic."""

import pytest
from django.db import IntegrityError, transaction

from server.apps.files.exceptions import InvalidTransitionError
from server.apps.files.logic.workflow import confirm_change, create_file
from server.apps.files.models import ChangeType, File
from server.apps.notifications.logic.notification_ledger import (
    WorkflowEvent,
    list_notifications,
    mark_all_read,
    mark_read,
    raise_event,
    resolve,
    resolve_pending_for_file,
    unread_count,
)
from server.apps.notifications.models import ActionStatus, Notification


@pytest.fixture
def pending_file(team, member):
    """Create a file waiting for the leader's approval.

    Returns:
        File instance in pending_approval.
    """
    result = create_file(team, member, 'notes.txt', 'hello')
    confirm_change(team, result.file_id, member)
    return File.objects.get(pk=result.file_id)


def _info_event(team, recipient, sender, message='FYI'):
    return WorkflowEvent(
        team=team,
        recipient=recipient,
        message=message,
        related_file=None,
        change_type=ChangeType.EDIT,
        initiated_by=sender,
    )


@pytest.mark.django_db
class TestRaiseEvent:
    """Tests for raise_event function."""

    def test_informational_event(self, team, leader, member):
        """Test plain events carry no action status."""
        notification = raise_event(_info_event(team, member, leader))

        assert notification.requires_approval is False
        assert notification.action_status is None
        assert notification.read is False
        assert notification.file_name == ''

    def test_approval_request(self, team, leader, member, pending_file):
        """Test events needing the leader start pending."""
        notification = Notification.objects.get(recipient=leader)

        assert notification.requires_approval is True
        assert notification.action_status == ActionStatus.PENDING
        assert notification.related_file == pending_file
        assert notification.file_name == 'notes.txt'

    def test_action_status_requires_approval_flag(self, team, leader, member):
        """Test the database keeps action status tied to approval requests."""
        notification = raise_event(_info_event(team, member, leader))

        with pytest.raises(IntegrityError), transaction.atomic():
            Notification.objects.filter(pk=notification.pk).update(
                action_status=ActionStatus.PENDING,
            )


@pytest.mark.django_db
class TestResolve:
    """Tests for resolve and resolve_pending_for_file functions."""

    def test_resolve_records_decision(self, team, leader, pending_file):
        """Test the decision, approver and time are stored."""
        notification = Notification.objects.get(recipient=leader)

        resolve(notification, ActionStatus.APPROVED, leader)

        notification.refresh_from_db()
        assert notification.action_status == ActionStatus.APPROVED
        assert notification.approver == leader
        assert notification.resolved_at is not None

    def test_resolve_twice(self, team, leader, pending_file):
        """Test a decided request cannot be decided again."""
        notification = Notification.objects.get(recipient=leader)
        resolve(notification, ActionStatus.REJECTED, leader)

        with pytest.raises(InvalidTransitionError):
            resolve(notification, ActionStatus.APPROVED, leader)

        notification.refresh_from_db()
        assert notification.action_status == ActionStatus.REJECTED

    def test_resolve_with_pending_outcome(self, team, leader, pending_file):
        """Test pending is not a decision."""
        notification = Notification.objects.get(recipient=leader)

        with pytest.raises(ValueError, match='Unsupported outcome'):
            resolve(notification, ActionStatus.PENDING, leader)

    def test_resolve_pending_for_file(self, team, leader, pending_file):
        """Test every pending request about the file is resolved once."""
        assert resolve_pending_for_file(team, pending_file, ActionStatus.APPROVED, leader) == 1
        assert resolve_pending_for_file(team, pending_file, ActionStatus.APPROVED, leader) == 0


@pytest.mark.django_db
class TestReadState:
    """Tests for read flags and listing."""

    def test_mark_read_keeps_decision_pending(self, team, leader, pending_file):
        """Test reading an approval request does not decide it."""
        notification = Notification.objects.get(recipient=leader)

        mark_read(team, notification.pk, leader)

        notification.refresh_from_db()
        assert notification.read is True
        assert notification.action_status == ActionStatus.PENDING

    def test_mark_read_other_recipient(self, team, leader, member, pending_file):
        """Test users cannot mark someone else's notifications."""
        notification = Notification.objects.get(recipient=leader)

        with pytest.raises(Notification.DoesNotExist):
            mark_read(team, notification.pk, member)

    def test_mark_all_read_and_unread_count(self, team, leader, member):
        """Test bulk read only touches the user's notifications."""
        raise_event(_info_event(team, member, leader, 'one'))
        raise_event(_info_event(team, member, leader, 'two'))
        raise_event(_info_event(team, leader, member, 'three'))

        assert unread_count(team, member) == 2
        assert mark_all_read(team, member) == 2
        assert unread_count(team, member) == 0
        assert unread_count(team, leader) == 1

    def test_list_notifications(self, team, leader, member, pending_file):
        """Test the list is scoped to the recipient."""
        snapshots = list_notifications(team, leader)

        assert len(snapshots) == 1
        assert snapshots[0].file_id == pending_file.pk
        assert snapshots[0].initiated_by == 'member'
        assert snapshots[0].action_status == ActionStatus.PENDING
        assert snapshots[0].approver is None
        assert list_notifications(team, member) == []
