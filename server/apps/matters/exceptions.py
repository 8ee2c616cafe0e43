"""Exceptions for matters app."""

import enum
from typing import ClassVar

from server.apps.matters.infrastructure.formatting import human_file_size


class ErrorKind(enum.StrEnum):
    """Category of a failed matter operation."""

    VALIDATION = 'validation'
    CONFLICT = 'conflict'
    QUOTA = 'quota'
    IO_FATAL = 'io_fatal'


class MatterError(Exception):
    """Base class for every failure of a matter operation."""

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str) -> None:
        """Initialize MatterError.

        Args:
            message: Human-readable description of the failure.
        """
        self.message = message
        super().__init__(message)


class MatterValidationError(MatterError):
    """Raised for bad arguments: names, paths, lengths, depth."""

    kind = ErrorKind.VALIDATION


class MatterConflictError(MatterError):
    """Raised when the tree state forbids the operation."""

    kind = ErrorKind.CONFLICT


class MatterIOError(MatterError):
    """Raised when the physical storage or a remote fetch fails."""

    kind = ErrorKind.IO_FATAL


class QuotaExceededError(MatterError):
    """Raised when an upload is larger than the user's size limit."""

    kind = ErrorKind.QUOTA

    def __init__(self, size_limit: int, size_bytes: int) -> None:
        """Initialize QuotaExceededError.

        Args:
            size_limit: User's upload limit in bytes.
            size_bytes: Observed size of the upload in bytes.
        """
        self.size_limit = size_limit
        self.size_bytes = size_bytes
        super().__init__(
            f'File size exceeds limit: {human_file_size(size_bytes)} '
            f'> {human_file_size(size_limit)}',
        )
