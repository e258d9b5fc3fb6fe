"""Metadata extraction utilities for files."""

import mimetypes
from typing import Final

from django.core.exceptions import ValidationError

_NAME_MAX_LENGTH: Final = 255
_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from file name.

    Uses Python's built-in mimetypes module to guess MIME type
    from filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'text/plain', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def calculate_size(content: str) -> int:
    """Calculate stored size of text content.

    Args:
        content: File content.

    Returns:
        Size in bytes of the UTF-8 encoded content.
    """
    return len(content.encode('utf-8'))


def validate_file_name(filename: str) -> None:
    """Validate a file name submitted by a member.

    Names are flat: team files have no folders.

    Args:
        filename: Proposed file name.

    Raises:
        ValidationError: If the name is empty, too long or contains a path.
    """
    if not filename or not filename.strip():
        raise ValidationError('File name cannot be empty')

    if len(filename) > _NAME_MAX_LENGTH:
        raise ValidationError(
            f'File name cannot exceed {_NAME_MAX_LENGTH} characters',
        )

    if '/' in filename or '\\' in filename:
        raise ValidationError('File name cannot contain path separators')

    if filename in {'.', '..'}:
        raise ValidationError(f'Invalid file name: {filename}')


def validate_size(size_bytes: int) -> None:
    """Validate a declared file size.

    Raises:
        ValidationError: If the size is negative.
    """
    if size_bytes < 0:
        raise ValidationError('File size cannot be negative')


def format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'
