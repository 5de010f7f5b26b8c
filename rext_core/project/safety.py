"""Safety gate run before any scaffold or destroy touches the filesystem.

Nothing here is cached: every call re-resolves the working directory and
re-probes the target, since the filesystem may have changed since the
previous operation.
"""

from __future__ import annotations

import os
from pathlib import Path

from rext_core.errors import (
    AppAlreadyExistsError,
    CurrentDirError,
    DirectoryReadError,
    ForeignContentsError,
    SafetyCheckError,
)

from .prober import ProjectState, missing_sentinels, probe


def resolve_project_root(path: str | Path | None = None) -> Path:
    """Return the absolute, canonical project root.

    Args:
        path: Explicit project directory.  Relative paths are resolved against
            the current working directory; ``None`` means the working
            directory itself.

    Raises:
        CurrentDirError: The working directory was deleted or is inaccessible.
        DirectoryReadError: The path could not be canonicalised (symlink loop).
    """
    candidate = Path(path).expanduser() if path is not None else None
    if candidate is None or not candidate.is_absolute():
        try:
            cwd = Path(os.getcwd())
        except OSError as exc:
            raise CurrentDirError(
                "Failed to get current directory, either does not exist "
                f"or permission denied: {exc}"
            ) from exc
        candidate = cwd if candidate is None else cwd / candidate

    try:
        return candidate.resolve()
    except (OSError, RuntimeError) as exc:
        raise DirectoryReadError(
            f"Failed to resolve {candidate}: {exc}", path=candidate
        ) from exc


def authorize_scaffold(path: str | Path | None = None) -> Path:
    """Allow scaffolding only into a missing or empty directory.

    Returns:
        The canonical project root.

    Raises:
        AppAlreadyExistsError: A project already lives at the path.
        ForeignContentsError: The directory holds unrelated contents.
    """
    root = resolve_project_root(path)
    state = probe(root)
    if state is ProjectState.VALID:
        raise AppAlreadyExistsError(f"Rext app already exists at {root}", path=root)
    if state is ProjectState.FOREIGN:
        raise ForeignContentsError(
            f"Refusing to scaffold into {root}: it is not empty and is not a Rext app",
            path=root,
        )
    return root


def authorize_destroy(path: str | Path | None = None, min_depth: int = 2) -> Path:
    """Allow destroying only a recognised project at a safe location.

    Checks, in order: the canonical path is not the filesystem root, the home
    directory or an ancestor of it, and has at least *min_depth* components;
    then the path must probe as a valid project.

    Returns:
        The canonical project root.

    Raises:
        SafetyCheckError: Any of the checks above failed.
    """
    root = resolve_project_root(path)
    check_destroy_location(root, min_depth)

    state = probe(root)
    if state is ProjectState.ABSENT:
        raise SafetyCheckError(f"No Rext app found at {root}", path=root)
    if state is ProjectState.FOREIGN:
        missing = ", ".join(missing_sentinels(root)) or "-"
        raise SafetyCheckError(
            f"{root} is not a Rext app (missing: {missing})", path=root
        )
    return root


def check_destroy_location(root: Path, min_depth: int = 2) -> None:
    """Reject locations that must never be destroyed, whatever they contain."""
    if root == Path(root.anchor):
        raise SafetyCheckError(
            f"Refusing to operate on the filesystem root {root}", path=root
        )

    home = _home_directory()
    if home is not None:
        if root == home:
            raise SafetyCheckError(
                f"Refusing to operate on the home directory {root}", path=root
            )
        if root in home.parents:
            raise SafetyCheckError(
                f"Refusing to operate on {root}: it contains the home directory",
                path=root,
            )

    depth = len(root.parts) - 1
    if depth < min_depth:
        raise SafetyCheckError(
            f"Refusing to operate on {root}: path depth {depth} is below "
            f"the minimum of {min_depth}",
            path=root,
        )


def _home_directory() -> Path | None:
    try:
        return Path.home().resolve()
    except (RuntimeError, KeyError, OSError):
        return None
