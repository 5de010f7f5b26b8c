"""Existence prober: is a directory a managed Rext project?"""

from __future__ import annotations

import os
import stat
from enum import Enum
from pathlib import Path

from rext_core.errors import DirectoryReadError

from .layout import SENTINELS, Sentinel


class ProjectState(str, Enum):
    """Classification of a candidate project root."""

    ABSENT = "absent"
    VALID = "valid"
    FOREIGN = "foreign"


def probe(path: str | Path) -> ProjectState:
    """Classify *path* without modifying anything.

    * ``ABSENT``  - the path does not exist, or is an empty directory.
    * ``VALID``   - every entry of ``SENTINELS`` is present with the right kind.
    * ``FOREIGN`` - anything else that exists (a non-empty directory that is
      not a project, or a non-directory at that path).

    Raises:
        DirectoryReadError: The path exists but cannot be inspected or listed.
    """
    root = Path(path)

    try:
        root_stat = root.stat()
    except FileNotFoundError:
        return ProjectState.ABSENT
    except NotADirectoryError:
        # A parent component is a regular file: nothing can live here.
        return ProjectState.ABSENT
    except OSError as exc:
        raise DirectoryReadError(
            f"Failed to read directory {root}: {exc}", path=root
        ) from exc

    if not stat.S_ISDIR(root_stat.st_mode):
        return ProjectState.FOREIGN

    try:
        with os.scandir(root) as entries:
            is_empty = next(entries, None) is None
    except OSError as exc:
        raise DirectoryReadError(
            f"Failed to read directory {root}: {exc}", path=root
        ) from exc

    if is_empty:
        return ProjectState.ABSENT

    if all(_sentinel_present(root, sentinel) for sentinel in SENTINELS):
        return ProjectState.VALID
    return ProjectState.FOREIGN


def missing_sentinels(path: str | Path) -> list[str]:
    """Return the sentinel paths not present under *path* (for diagnostics)."""
    root = Path(path)
    return [
        sentinel.path.as_posix()
        for sentinel in SENTINELS
        if not _sentinel_present(root, sentinel)
    ]


def _sentinel_present(root: Path, sentinel: Sentinel) -> bool:
    target = root.joinpath(*sentinel.path.parts)
    try:
        mode = target.lstat().st_mode
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as exc:
        raise DirectoryReadError(
            f"Failed to inspect {target}: {exc}", path=target
        ) from exc
    if sentinel.is_dir:
        return stat.S_ISDIR(mode)
    return stat.S_ISREG(mode)
