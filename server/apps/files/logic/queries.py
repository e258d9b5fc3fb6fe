"""Read-only queries over team files."""

from dataclasses import dataclass
from datetime import datetime

from server.apps.files.models import File, FileStatus
from server.apps.teams.models import Team


@dataclass(frozen=True, slots=True)
class FileSnapshot:
    """Read-only view of a file for presentation."""

    id: int
    name: str
    file_type: str
    size: int
    content: str
    status: str
    change_type: str
    owner: str
    primary_node: str
    replica_nodes: tuple[str, ...]
    last_modified_by: str | None
    version: int
    created_at: datetime
    last_modified_at: datetime


def _snapshot(file_instance: File) -> FileSnapshot:
    return FileSnapshot(
        id=file_instance.pk,
        name=file_instance.name,
        file_type=file_instance.file_type,
        size=file_instance.size,
        content=file_instance.content,
        status=file_instance.status,
        change_type=file_instance.change_type,
        owner=file_instance.owner.username,
        primary_node=file_instance.primary_node.name,
        replica_nodes=tuple(
            node.name for node in file_instance.replica_nodes.all()
        ),
        last_modified_by=(
            file_instance.last_modified_by.username
            if file_instance.last_modified_by else None
        ),
        version=file_instance.version,
        created_at=file_instance.created_at,
        last_modified_at=file_instance.last_modified_at,
    )


def list_files(team: Team, status: FileStatus | None = None) -> list[FileSnapshot]:
    """List a team's files, most recently modified first.

    Args:
        team: Team whose files to list.
        status: Only include files in this status, if given.

    Returns:
        Snapshots of the files.
    """
    files = File.objects.filter(team=team).select_related(
        'owner',
        'primary_node',
        'last_modified_by',
    ).prefetch_related('replica_nodes')
    if status is not None:
        files = files.filter(status=status)
    return [_snapshot(file_instance) for file_instance in files]


def list_pending_approvals(team: Team) -> list[FileSnapshot]:
    """List files waiting for the leader's decision."""
    return [
        *list_files(team, FileStatus.PENDING_APPROVAL),
        *list_files(team, FileStatus.PENDING_DELETE),
    ]


def get_file(team: Team, file_id: int) -> FileSnapshot:
    """Get one team file.

    Raises:
        File.DoesNotExist: If the team has no such file.
    """
    file_instance = File.objects.select_related(
        'owner',
        'primary_node',
        'last_modified_by',
    ).get(team=team, pk=file_id)
    return _snapshot(file_instance)
