"""Exceptions raised by the file approval workflow.

All of them are raised inside the action's atomic block, so the caller
always sees the previous persisted state.
"""


class WorkflowError(Exception):
    """Base class for rejected workflow actions."""


class CapacityError(WorkflowError):
    """Raised when a node cannot hold the bytes an action needs."""

    def __init__(
        self,
        node_name: str,
        available_bytes: int,
        required_bytes: int,
    ) -> None:
        """Initialize CapacityError.

        Args:
            node_name: Node that ran out of space.
            available_bytes: Bytes still free on the node.
            required_bytes: Bytes needed for the operation.
        """
        self.node_name = node_name
        self.available_bytes = available_bytes
        self.required_bytes = required_bytes

        super().__init__(
            f'Insufficient capacity on {node_name}: need {required_bytes} '
            f'bytes, only {available_bytes} bytes available',
        )


class InvalidTransitionError(WorkflowError):
    """Raised when an action is not allowed from the file's status."""

    def __init__(self, status: str, action: str) -> None:
        """Initialize InvalidTransitionError.

        Args:
            status: Current status of the file (or notification).
            action: Action that was attempted.
        """
        self.status = status
        self.action = action

        super().__init__(f'Cannot {action} while status is {status}')


class AuthorizationError(WorkflowError):
    """Raised when the actor lacks the role an action requires."""


class ConflictError(WorkflowError):
    """Raised when the file changed since the caller last read it."""

    def __init__(
        self,
        file_id: int,
        expected_version: int,
        actual_version: int | None,
    ) -> None:
        """Initialize ConflictError.

        Args:
            file_id: File that was modified concurrently.
            expected_version: Version the caller acted upon.
            actual_version: Version currently stored, if known.
        """
        self.file_id = file_id
        self.expected_version = expected_version
        self.actual_version = actual_version

        super().__init__(
            f'File {file_id} changed concurrently: expected version '
            f'{expected_version}, found {actual_version}',
        )
