"""Capacity accounting for simulated storage nodes.

Every function here mutates counters with a single conditional UPDATE or
under ``select_for_update``, and joins the caller's transaction. The
files workflow wraps each action in ``transaction.atomic()`` so that all
node updates of one action commit or roll back together.
"""

import logging
from dataclasses import dataclass
from typing import Final

from django.conf import settings
from django.db import transaction
from django.db.models import F  # noqa: WPS347
from django.utils import timezone

from server.apps.files.exceptions import CapacityError
from server.apps.files.models import File
from server.apps.nodes.models import NodeRole, StorageNode
from server.apps.teams.models import Team

_COUNTER_FIELDS: Final = (
    'used_storage',
    'available_storage',
    'file_count',
    'updated_at',
)
MAX_BACKUP_NODES: Final = 2

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NodeSnapshot:
    """Read-only view of a node for presentation."""

    id: int
    name: str
    role: str
    status: str
    total_storage: int
    used_storage: int
    available_storage: int
    file_count: int


def get_default_capacity() -> int:
    """Get capacity given to newly provisioned nodes.

    Returns:
        Capacity in bytes from settings or default of 1 GB.
    """
    return getattr(settings, 'NODE_DEFAULT_CAPACITY_BYTES', 1024 * 1024 * 1024)


def get_default_backup_count() -> int:
    """Get number of backup nodes provisioned for a new team.

    Returns:
        Backup count from settings or default of 2.
    """
    return getattr(settings, 'NODE_DEFAULT_BACKUP_COUNT', MAX_BACKUP_NODES)


def provision_nodes(
    team: Team,
    capacity_bytes: int,
    backup_count: int,
) -> list[StorageNode]:
    """Create the primary node and backup nodes of a new team.

    Args:
        team: Team that owns the nodes.
        capacity_bytes: Capacity of every node in bytes.
        backup_count: Number of backup nodes (0-2).

    Returns:
        Created nodes, primary first.
    """
    nodes = [
        StorageNode.objects.create(
            team=team,
            name=f'{team.name}-primary',
            role=NodeRole.PRIMARY,
            total_storage=capacity_bytes,
            available_storage=capacity_bytes,
        ),
    ]
    for index in range(1, backup_count + 1):
        nodes.append(
            StorageNode.objects.create(
                team=team,
                name=f'{team.name}-backup-{index}',
                role=NodeRole.BACKUP,
                total_storage=capacity_bytes,
                available_storage=capacity_bytes,
            ),
        )

    logger.info(
        'Provisioned %d nodes for team %s (%d bytes each)',
        len(nodes),
        team.name,
        capacity_bytes,
    )
    return nodes


def get_primary_node(team: Team) -> StorageNode:
    """Get the primary node of a team.

    Raises:
        StorageNode.DoesNotExist: If the team has no primary node.
    """
    return StorageNode.objects.get(team=team, role=NodeRole.PRIMARY)


def get_backup_nodes(team: Team) -> list[StorageNode]:
    """Get the backup nodes of a team, ordered by name."""
    return list(
        StorageNode.objects.filter(
            team=team,
            role=NodeRole.BACKUP,
        ).order_by('name'),
    )


def _grow(node: StorageNode, size_bytes: int, *, new_file: bool) -> None:
    """Move bytes from available to used, refusing to overcommit."""
    counters = {
        'used_storage': F('used_storage') + size_bytes,
        'available_storage': F('available_storage') - size_bytes,
        'updated_at': timezone.now(),
    }
    if new_file:
        counters['file_count'] = F('file_count') + 1

    updated = StorageNode.objects.filter(
        pk=node.pk,
        available_storage__gte=size_bytes,
    ).update(**counters)

    node.refresh_from_db(fields=_COUNTER_FIELDS)

    if updated == 0:
        logger.warning(
            'Capacity exceeded on node %s: need %d, have %d available',
            node.name,
            size_bytes,
            node.available_storage,
        )
        raise CapacityError(
            node_name=node.name,
            available_bytes=node.available_storage,
            required_bytes=size_bytes,
        )


def _shrink(node: StorageNode, size_bytes: int, *, drop_file: bool) -> None:
    """Return bytes to available, clamping usage at zero."""
    with transaction.atomic():
        locked = StorageNode.objects.select_for_update().get(pk=node.pk)

        locked.used_storage = max(0, locked.used_storage - size_bytes)
        locked.available_storage = locked.total_storage - locked.used_storage
        if drop_file:
            locked.file_count = max(0, locked.file_count - 1)
        locked.save(update_fields=list(_COUNTER_FIELDS))

    node.refresh_from_db(fields=_COUNTER_FIELDS)


def reserve(node: StorageNode, size_bytes: int) -> None:
    """Account a new file on a node.

    Args:
        node: Node receiving the file.
        size_bytes: File size in bytes.

    Raises:
        CapacityError: If the node has less than ``size_bytes`` available.
    """
    _grow(node, size_bytes, new_file=True)

    logger.debug(
        'Reserved %d bytes on node %s (used: %d)',
        size_bytes,
        node.name,
        node.used_storage,
    )


def release(node: StorageNode, size_bytes: int) -> None:
    """Remove a file's accounting from a node.

    Usage and file count are floored at 0.

    Args:
        node: Node that held the file.
        size_bytes: File size in bytes.
    """
    _shrink(node, size_bytes, drop_file=True)

    logger.debug(
        'Released %d bytes on node %s (used: %d)',
        size_bytes,
        node.name,
        node.used_storage,
    )


def sync_to_replica(node: StorageNode, size_bytes: int) -> None:
    """Account an approved file on a backup node.

    Same accounting as ``reserve``, applied to each backup independently.

    Args:
        node: Backup node receiving the replica.
        size_bytes: File size in bytes.

    Raises:
        CapacityError: If the backup node has not enough space.
    """
    _grow(node, size_bytes, new_file=True)

    logger.info(
        'Synced %d bytes to replica %s (used: %d)',
        size_bytes,
        node.name,
        node.used_storage,
    )


def adjust(node: StorageNode, old_size: int, new_size: int) -> None:
    """Apply an approved edit's size change to a node.

    File count is unchanged.

    Args:
        node: Node holding the file.
        old_size: Previously accounted size in bytes.
        new_size: New size in bytes.

    Raises:
        CapacityError: If the file grew beyond the node's free space.
    """
    size_diff = new_size - old_size

    if size_diff > 0:
        _grow(node, size_diff, new_file=False)
    elif size_diff < 0:
        _shrink(node, -size_diff, drop_file=False)
    # If size_diff == 0, no adjustment needed


def calculate_usage(node: StorageNode) -> tuple[int, int]:
    """Compute what a node should account for from the files it holds.

    Pending edits count with their previous size, since edits only
    move counters once approved.

    Returns:
        Tuple of (used bytes, file count).
    """
    held_files = [
        *File.objects.filter(primary_node=node),
        *File.objects.filter(replica_nodes=node),
    ]
    total = sum(file_instance.committed_size for file_instance in held_files)
    return total, len(held_files)


def recalculate_usage(node: StorageNode) -> int:
    """Recalculate a node's counters from the files that reference it.

    Useful for repairing counters after manual database edits.

    Args:
        node: Node to recalculate.

    Returns:
        New calculated usage in bytes.

    Raises:
        CapacityError: If the referenced files exceed the node's capacity.
    """
    total, file_count = calculate_usage(node)

    if total > node.total_storage:
        logger.error(
            'Files on node %s need %d bytes, capacity is %d',
            node.name,
            total,
            node.total_storage,
        )
        raise CapacityError(
            node_name=node.name,
            available_bytes=node.total_storage,
            required_bytes=total,
        )

    with transaction.atomic():
        locked = StorageNode.objects.select_for_update().get(pk=node.pk)
        old_usage = locked.used_storage
        locked.used_storage = total
        locked.available_storage = locked.total_storage - total
        locked.file_count = file_count
        locked.save(update_fields=list(_COUNTER_FIELDS))

    node.refresh_from_db(fields=_COUNTER_FIELDS)

    logger.info(
        'Recalculated usage for node %s: %d -> %d bytes',
        node.name,
        old_usage,
        total,
    )

    return total


def list_nodes(team: Team) -> list[NodeSnapshot]:
    """List a team's nodes, primary first.

    Args:
        team: Team whose nodes to list.

    Returns:
        Snapshots of the team's nodes.
    """
    nodes = StorageNode.objects.filter(team=team).order_by('-role', 'name')
    return [
        NodeSnapshot(
            id=node.pk,
            name=node.name,
            role=node.role,
            status=node.status,
            total_storage=node.total_storage,
            used_storage=node.used_storage,
            available_storage=node.available_storage,
            file_count=node.file_count,
        )
        for node in nodes
    ]
