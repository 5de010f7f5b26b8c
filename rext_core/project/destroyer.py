"""Project removal.

Deletes everything a Rext project owns under its root, after the safety gate
has re-validated the target.  The removal list is built completely before the
first deletion so that an unreadable directory aborts the operation without
any damage.  Deletion stops at the first failure.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from rext_core.config import Config
from rext_core.errors import (
    DirectoryReadError,
    DirectoryRemovalError,
    FileRemovalError,
)
from rext_core.utils import console

from .layout import managed_top_level_entries
from .safety import authorize_destroy


@dataclass
class RemovalEntry:
    path: Path
    is_dir: bool


@dataclass
class DestroyResult:
    """What a successful destroy removed."""

    root: Path
    files_removed: list[Path] = field(default_factory=list)
    directories_removed: list[Path] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"Removed Rext app at {self.root} "
            f"({len(self.files_removed)} files, "
            f"{len(self.directories_removed)} directories)"
        )


class ProjectDestroyer:
    """Removes a managed project's files and directories."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()

    def destroy(self, path: str | Path | None = None) -> DestroyResult:
        """Remove the project at *path* (default: working directory).

        The project root directory itself is kept, emptied of everything the
        project owns.  Entries the project does not manage (``.git``, notes
        added by hand) are left in place, and a root that still holds any of
        them probes as FOREIGN afterwards rather than ABSENT.

        Raises:
            SafetyCheckError: The gate refused the target.
            DirectoryReadError: Part of the tree could not be listed.
            FileRemovalError: A file or symlink could not be removed.
            DirectoryRemovalError: A directory could not be removed.
        """
        root = authorize_destroy(path, min_depth=self.config.safety.min_depth)
        removals = collect_removals(root)

        console.print(
            f"[yellow]Removing Rext app at[/yellow] [bold]{root}[/bold] "
            f"({len(removals)} entries)..."
        )

        result = DestroyResult(root=root)
        for entry in removals:
            if entry.is_dir:
                try:
                    entry.path.rmdir()
                except OSError as exc:
                    raise DirectoryRemovalError(
                        f"Failed to remove directory {entry.path}: {exc}",
                        path=entry.path,
                    ) from exc
                result.directories_removed.append(entry.path)
            else:
                try:
                    entry.path.unlink()
                except OSError as exc:
                    raise FileRemovalError(
                        f"Failed to remove file {entry.path}: {exc}",
                        path=entry.path,
                    ) from exc
                result.files_removed.append(entry.path)

        console.print(f"[green]{result.summary()}[/green]")
        return result


def collect_removals(root: Path) -> list[RemovalEntry]:
    """List every path to delete under *root*, children before parents.

    Only the project's managed top-level entries are visited.  Symlinks are
    listed as files and never followed.

    Raises:
        DirectoryReadError: A directory could not be listed.
    """
    removals: list[RemovalEntry] = []
    for name in managed_top_level_entries():
        top = root / name
        if not top.is_symlink() and top.is_dir():
            removals.extend(_walk_bottom_up(top))
        elif top.is_symlink() or top.exists():
            removals.append(RemovalEntry(top, is_dir=False))
    return removals


def _walk_bottom_up(top: Path) -> list[RemovalEntry]:
    def _raise(exc: OSError) -> None:
        raise DirectoryReadError(
            f"Failed to read directory {exc.filename}: {exc}",
            path=exc.filename or top,
        ) from exc

    entries: list[RemovalEntry] = []
    for dirpath, dirnames, filenames in os.walk(top, topdown=False, onerror=_raise):
        current = Path(dirpath)
        for filename in sorted(filenames):
            entries.append(RemovalEntry(current / filename, is_dir=False))
        for dirname in sorted(dirnames):
            # os.walk reports symlinks to directories as dirnames but does
            # not descend into them.
            link = current / dirname
            if link.is_symlink():
                entries.append(RemovalEntry(link, is_dir=False))
        entries.append(RemovalEntry(current, is_dir=True))
    return entries
