"""Project scaffolding.

Materialises a :class:`~rext_core.project.layout.ScaffoldPlan` under a
project root that the safety gate has confirmed is missing or empty.  If any
step fails, everything created by this invocation is removed again in reverse
order before the error is raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rext_core.config import DEFAULT_APP_NAME, Config
from rext_core.errors import DirectoryCreationError, FileWriteError, RextCoreError
from rext_core.utils import console, sanitize_name

from .layout import ScaffoldPlan, build_scaffold_plan
from .safety import authorize_scaffold
from .templates import TemplateRenderer


@dataclass
class ScaffoldResult:
    """What a successful scaffold created."""

    root: Path
    app_name: str
    directories_created: list[Path] = field(default_factory=list)
    files_written: list[Path] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"Created Rext app '{self.app_name}' at {self.root} "
            f"({len(self.directories_created)} directories, "
            f"{len(self.files_written)} files)"
        )


class ProjectScaffolder:
    """Creates a new Rext project from the bundled templates.

    Usage::

        scaffolder = ProjectScaffolder(Config(app_name="blog"))
        result = scaffolder.scaffold("/srv/apps/blog")
    """

    def __init__(
        self,
        config: Config | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or Config()
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    def plan(self, root: Path) -> ScaffoldPlan:
        """Return the fully rendered plan for a project at *root*."""
        return build_scaffold_plan(
            self.app_name_for(root), self.config.modules, self.renderer
        )

    def app_name_for(self, root: Path) -> str:
        """Configured app name, else the sanitised directory name."""
        return (
            sanitize_name(self.config.app_name)
            or sanitize_name(root.name)
            or DEFAULT_APP_NAME
        )

    def scaffold(self, path: str | Path | None = None) -> ScaffoldResult:
        """Create the project skeleton at *path* (default: working directory).

        Missing parent directories are created as well and count as created
        by this run, so a rollback removes them again.

        Raises:
            AppAlreadyExistsError: A project already exists there.
            ForeignContentsError: The directory holds unrelated files.
            DirectoryCreationError: A directory could not be created.
            FileWriteError: A template could not be rendered or written.
        """
        root = authorize_scaffold(path)
        app_name = self.app_name_for(root)
        plan = build_scaffold_plan(app_name, self.config.modules, self.renderer)

        result = ScaffoldResult(root=root, app_name=app_name)
        try:
            for directory in _missing_ancestors(root):
                _make_directory(directory)
                result.directories_created.append(directory)

            for entry in plan.directories:
                directory = root.joinpath(*entry.path.parts)
                if directory.is_dir():
                    continue
                _make_directory(directory)
                result.directories_created.append(directory)

            for entry in plan.files:
                target = root.joinpath(*entry.path.parts)
                try:
                    _write_file(target, entry.content or "")
                except FileExistsError as exc:
                    raise FileWriteError(
                        f"Failed to write file {target}: already exists", path=target
                    ) from exc
                except FileWriteError:
                    if target.exists():
                        # Opened but only partially written.
                        result.files_written.append(target)
                    raise
                result.files_written.append(target)
        except RextCoreError as exc:
            exc.rollback_attempted = True
            exc.rollback_errors.extend(_rollback(result))
            if exc.rollback_errors:
                console.print(
                    f"[bold yellow]Rollback incomplete for {root}; "
                    f"manual cleanup required:[/bold yellow]"
                )
                for problem in exc.rollback_errors:
                    console.print(f"  [yellow]- {problem}[/yellow]")
            raise

        console.print(f"[green]{result.summary()}[/green]")
        return result


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _missing_ancestors(root: Path) -> list[Path]:
    """*root* and its parents that do not exist yet, outermost first."""
    missing: list[Path] = []
    for candidate in (root, *root.parents):
        if candidate.exists():
            break
        missing.append(candidate)
    return list(reversed(missing))


def _make_directory(path: Path) -> None:
    """Create a single directory; its parent must already exist."""
    try:
        path.mkdir()
    except OSError as exc:
        raise DirectoryCreationError(
            f"Failed to create directory {path}: {exc}", path=path
        ) from exc


def _write_file(path: Path, content: str) -> None:
    """Create *path* exclusively and write *content* to it.

    ``FileExistsError`` propagates untouched so the caller never claims (and
    later deletes) a file it did not create.
    """
    try:
        handle = path.open("x", encoding="utf-8")
    except FileExistsError:
        raise
    except OSError as exc:
        raise FileWriteError(f"Failed to write file {path}: {exc}", path=path) from exc

    try:
        with handle:
            handle.write(content)
    except OSError as exc:
        raise FileWriteError(f"Failed to write file {path}: {exc}", path=path) from exc


def _rollback(result: ScaffoldResult) -> list[str]:
    """Best-effort removal of everything in *result*, newest first.

    Returns a description of every entry that could not be removed.
    """
    problems: list[str] = []
    for file_path in reversed(result.files_written):
        try:
            file_path.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            problems.append(f"could not remove file {file_path}: {exc}")
    for directory in reversed(result.directories_created):
        try:
            directory.rmdir()
        except FileNotFoundError:
            continue
        except OSError as exc:
            problems.append(f"could not remove directory {directory}: {exc}")
    return problems
