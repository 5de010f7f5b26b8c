"""Error taxonomy for project lifecycle operations.

Every filesystem or subprocess failure is converted into one of the classes
below at the point where it happens, with the offending path or command
attached.  The CLI layer maps :class:`ErrorKind` values to exit codes.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(str, Enum):
    """Machine-readable identifier for each lifecycle error."""

    DIRECTORY_CREATION = "directory_creation"
    FILE_WRITE = "file_write"
    APP_ALREADY_EXISTS = "app_already_exists"
    FOREIGN_CONTENTS = "foreign_contents"
    CURRENT_DIR = "current_dir"
    DIRECTORY_READ = "directory_read"
    FILE_REMOVAL = "file_removal"
    DIRECTORY_REMOVAL = "directory_removal"
    SAFETY_CHECK = "safety_check"
    SEA_ORM_CLI_GENERATE_ENTITIES = "sea_orm_cli_generate_entities"


class RextCoreError(Exception):
    """Base class for all lifecycle errors.

    Attributes:
        kind: The :class:`ErrorKind` of this error.
        path: Filesystem path the failure relates to, if any.
        command: Command line that failed, if any.
        stderr: Captured standard error of a failed command.
        rollback_attempted: Whether partial work was undone before raising.
        rollback_errors: Failures hit while undoing partial work.  Empty when
            the rollback was clean or none was attempted.
    """

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        path: str | Path | None = None,
        command: str = "",
        stderr: str = "",
        rollback_errors: list[str] | None = None,
    ):
        self.path = Path(path) if path is not None else None
        self.command = command
        self.stderr = stderr
        self.rollback_attempted = bool(rollback_errors)
        self.rollback_errors: list[str] = list(rollback_errors or [])
        super().__init__(message)

    @property
    def rollback_clean(self) -> bool:
        """``False`` when partial output may remain and needs manual cleanup."""
        return not self.rollback_errors


class DirectoryCreationError(RextCoreError):
    """A directory could not be created."""

    kind = ErrorKind.DIRECTORY_CREATION


class FileWriteError(RextCoreError):
    """A file could not be written."""

    kind = ErrorKind.FILE_WRITE


class AppAlreadyExistsError(RextCoreError):
    """Scaffold was attempted on a directory that is already a project."""

    kind = ErrorKind.APP_ALREADY_EXISTS


class ForeignContentsError(RextCoreError):
    """The directory holds something that is not a managed project."""

    kind = ErrorKind.FOREIGN_CONTENTS


class CurrentDirError(RextCoreError):
    """The working directory no longer exists or cannot be accessed."""

    kind = ErrorKind.CURRENT_DIR


class DirectoryReadError(RextCoreError):
    """A directory exists but could not be listed or inspected."""

    kind = ErrorKind.DIRECTORY_READ


class FileRemovalError(RextCoreError):
    kind = ErrorKind.FILE_REMOVAL


class DirectoryRemovalError(RextCoreError):
    kind = ErrorKind.DIRECTORY_REMOVAL


class SafetyCheckError(RextCoreError):
    """The safety gate refused a destructive operation."""

    kind = ErrorKind.SAFETY_CHECK


class SeaOrmCliGenerateEntitiesError(RextCoreError):
    """``sea-orm-cli generate entity`` failed or produced no output."""

    kind = ErrorKind.SEA_ORM_CLI_GENERATE_ENTITIES
