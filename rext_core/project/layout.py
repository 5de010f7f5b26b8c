"""Filesystem layout contract of a managed Rext project.

Single source of truth for:

* ``SENTINELS`` - the paths whose simultaneous presence marks a managed project,
* ``PROJECT_FILES`` - every file the scaffolder can write, tagged by module,
* ``ENTITY_OUTPUT_DIR`` - where ``sea-orm-cli`` writes generated entities,
* ``build_scaffold_plan`` - the ordered, fully rendered list of directories and
  files to materialise for a given app name and module selection.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import PurePosixPath

from jinja2 import TemplateError

from rext_core.config import RextModule
from rext_core.errors import FileWriteError

from .templates import TemplateRenderer

ENTITY_OUTPUT_DIR = PurePosixPath("backend/entity/models")

# Files produced by building or running a project.  They are not scaffolded
# but belong to the project and are removed with it.
BUILD_ARTIFACTS: tuple[str, ...] = ("Cargo.lock", "target", ".env")


@dataclass(frozen=True)
class Sentinel:
    """A relative path that must exist (with the given kind) in every project."""

    path: PurePosixPath
    is_dir: bool = False


SENTINELS: tuple[Sentinel, ...] = (
    Sentinel(PurePosixPath("rext.toml")),
    Sentinel(PurePosixPath("Cargo.toml")),
    Sentinel(PurePosixPath("backend"), is_dir=True),
    Sentinel(PurePosixPath("backend/main.rs")),
    Sentinel(PurePosixPath("backend/entity"), is_dir=True),
    Sentinel(ENTITY_OUTPUT_DIR, is_dir=True),
    Sentinel(PurePosixPath("migration"), is_dir=True),
)


@dataclass(frozen=True)
class ProjectFile:
    """A file written by the scaffolder, rendered from a ``.j2`` template."""

    path: str
    module: RextModule = RextModule.CORE
    template: str | None = None

    @property
    def template_name(self) -> str:
        return self.template or f"{self.path}.j2"


PROJECT_FILES: tuple[ProjectFile, ...] = (
    # Root files
    ProjectFile("rext.toml"),
    ProjectFile("example.env"),
    ProjectFile("docker-compose.yml"),
    ProjectFile(".dockerignore", template="dockerignore.j2"),
    ProjectFile("Dockerfile"),
    ProjectFile(".gitignore", template="gitignore.j2"),
    ProjectFile("README.md"),
    ProjectFile("build.rs"),
    ProjectFile("Cargo.toml"),
    # Backend
    ProjectFile("backend/main.rs"),
    ProjectFile("backend/bridge/mod.rs"),
    ProjectFile("backend/bridge/handlers/mod.rs"),
    ProjectFile("backend/bridge/handlers/auth.rs"),
    ProjectFile("backend/bridge/handlers/admin.rs", RextModule.ADMIN),
    ProjectFile("backend/bridge/middleware/mod.rs"),
    ProjectFile("backend/bridge/middleware/auth.rs"),
    ProjectFile("backend/bridge/middleware/logging.rs"),
    ProjectFile("backend/bridge/routes/mod.rs"),
    ProjectFile("backend/bridge/routes/auth.rs"),
    ProjectFile("backend/bridge/routes/admin.rs", RextModule.ADMIN),
    ProjectFile("backend/bridge/types/mod.rs"),
    ProjectFile("backend/bridge/types/auth.rs"),
    ProjectFile("backend/control/mod.rs"),
    ProjectFile("backend/control/services/mod.rs"),
    ProjectFile("backend/control/services/auth_service.rs"),
    ProjectFile("backend/control/services/user_service.rs"),
    ProjectFile("backend/control/services/admin_service.rs", RextModule.ADMIN),
    ProjectFile("backend/control/services/startup.rs"),
    ProjectFile("backend/domain/mod.rs"),
    ProjectFile("backend/domain/user.rs"),
    ProjectFile("backend/domain/validation.rs"),
    ProjectFile("backend/entity/mod.rs"),
    ProjectFile("backend/infrastructure/mod.rs"),
    ProjectFile("backend/infrastructure/app_error.rs"),
    ProjectFile("backend/infrastructure/database.rs"),
    ProjectFile("backend/infrastructure/logging.rs"),
    ProjectFile("backend/infrastructure/server.rs"),
    ProjectFile("backend/infrastructure/job_queue.rs", RextModule.QUEUE),
    ProjectFile("backend/infrastructure/scheduler.rs", RextModule.QUEUE),
    ProjectFile("backend/infrastructure/email.rs", RextModule.EMAIL),
    # Frontend
    ProjectFile("frontend/package.json"),
    ProjectFile("frontend/vite.config.ts"),
    ProjectFile("frontend/tsconfig.json"),
    ProjectFile("frontend/index.html", RextModule.VUE),
    ProjectFile("frontend/src/main.ts", RextModule.VUE),
    ProjectFile("frontend/src/App.vue", RextModule.VUE),
    # Migrations
    ProjectFile("migration/Cargo.toml"),
    ProjectFile("migration/src/lib.rs"),
    ProjectFile("migration/src/main.rs"),
    ProjectFile("migration/src/initial_migration.rs"),
)

# Directories that must exist even though the scaffolder writes no file there.
PROJECT_DIRECTORIES: tuple[PurePosixPath, ...] = (ENTITY_OUTPUT_DIR,)


# ---------------------------------------------------------------------------
# Scaffold plan
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScaffoldEntry:
    """One entry of a plan: a directory (``content is None``) or a file."""

    path: PurePosixPath
    content: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.content is None


@dataclass(frozen=True)
class ScaffoldPlan:
    """Ordered entries to materialise: every directory, then every file.

    Directories are sorted parents-first, so iterating the plan always creates
    a directory before anything inside it.
    """

    entries: tuple[ScaffoldEntry, ...]

    @property
    def directories(self) -> tuple[ScaffoldEntry, ...]:
        return tuple(e for e in self.entries if e.is_dir)

    @property
    def files(self) -> tuple[ScaffoldEntry, ...]:
        return tuple(e for e in self.entries if not e.is_dir)

    def paths(self) -> list[PurePosixPath]:
        return [e.path for e in self.entries]

    def __iter__(self) -> Iterator[ScaffoldEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def files_for_modules(modules: Iterable[RextModule]) -> tuple[ProjectFile, ...]:
    """Return the project files belonging to *modules*, in declaration order."""
    selected = set(modules) | {RextModule.CORE}
    return tuple(f for f in PROJECT_FILES if f.module in selected)


def build_scaffold_plan(
    app_name: str,
    modules: Iterable[RextModule] = (RextModule.CORE,),
    renderer: TemplateRenderer | None = None,
) -> ScaffoldPlan:
    """Render every template and return the complete plan.

    No filesystem writes happen here; a template that cannot be loaded or
    rendered raises :class:`~rext_core.errors.FileWriteError` before the
    scaffolder starts creating anything.
    """
    renderer = renderer or TemplateRenderer()
    modules = list(modules)
    selected = files_for_modules(modules)
    context = {
        "app_name": app_name,
        "modules": [m.value for m in modules],
        "entity_output_dir": ENTITY_OUTPUT_DIR.as_posix(),
    }

    available = set(renderer.list_templates())
    missing = [f.template_name for f in selected if f.template_name not in available]
    if missing:
        raise FileWriteError(
            f"Missing templates in {renderer.template_dir}: {', '.join(missing)}",
            path=renderer.template_dir,
        )

    directories: list[PurePosixPath] = []
    chains = [_ancestors(PurePosixPath(f.path)) for f in selected]
    chains += [[*_ancestors(d), d] for d in PROJECT_DIRECTORIES]
    for chain in chains:
        for directory in chain:
            if directory not in directories:
                directories.append(directory)
    # Stable sort: parents first, declaration order within a depth.
    directories.sort(key=lambda d: len(d.parts))

    entries = [ScaffoldEntry(d) for d in directories]
    for project_file in selected:
        try:
            content = renderer.render(project_file.template_name, context)
        except (TemplateError, OSError) as exc:
            raise FileWriteError(
                f"Failed to render template {project_file.template_name}: {exc}",
                path=project_file.path,
            ) from exc
        entries.append(ScaffoldEntry(PurePosixPath(project_file.path), content))

    return ScaffoldPlan(tuple(entries))


def _ancestors(path: PurePosixPath) -> list[PurePosixPath]:
    """Parent directories of a relative *path*, outermost first."""
    return [p for p in reversed(path.parents) if p != PurePosixPath(".")]


def managed_top_level_entries(
    modules: Iterable[RextModule] = tuple(RextModule),
) -> tuple[str, ...]:
    """Top-level names owned by a project built with *modules*.

    Defaults to every module so a project is removed completely regardless of
    how it was scaffolded.
    """
    names: list[str] = []
    paths = [PurePosixPath(f.path) for f in files_for_modules(modules)]
    paths += list(PROJECT_DIRECTORIES)
    paths += [PurePosixPath(a) for a in BUILD_ARTIFACTS]
    for path in paths:
        top = path.parts[0]
        if top not in names:
            names.append(top)
    return tuple(names)
