"""Shared pytest fixtures for the rext-core test suite.

Provides reusable fixtures for:
- An isolated home directory so the safety gate never sees the real one
- Empty, foreign and scaffolded project directories
- A fake ``ProcessRunner`` standing in for ``sea-orm-cli``
- Filesystem snapshot helpers for "nothing changed" assertions
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from rext_core.config import Config
from rext_core.entities.runner import ProcessResult
from rext_core.project.layout import ENTITY_OUTPUT_DIR
from rext_core.project.scaffolder import ProjectScaffolder


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``HOME`` at a throwaway directory outside every test project."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def empty_dir(tmp_path: Path) -> Path:
    """An existing, empty directory (probes as ABSENT)."""
    target = tmp_path / "app1"
    target.mkdir()
    return target


@pytest.fixture
def foreign_dir(tmp_path: Path) -> Path:
    """A non-empty directory that is not a Rext project."""
    target = tmp_path / "photos"
    target.mkdir()
    (target / "holiday.jpg").write_bytes(b"\xff\xd8\xff")
    (target / "notes.txt").write_text("keep me\n", encoding="utf-8")
    return target


@pytest.fixture
def scaffolded_project(tmp_path: Path) -> Path:
    """A project created by the real scaffolder with the default config."""
    target = tmp_path / "blog"
    ProjectScaffolder(Config(app_name="blog")).scaffold(target)
    return target


@pytest.fixture
def entity_dir(scaffolded_project: Path) -> Path:
    return scaffolded_project.joinpath(*ENTITY_OUTPUT_DIR.parts)


# ---------------------------------------------------------------------------
# Snapshot helpers
# ---------------------------------------------------------------------------

def snapshot_tree(root: Path) -> dict[str, str]:
    """Map every path under *root* to a content hash (``"<dir>"`` for directories)."""
    result: dict[str, str] = {}
    if not root.exists():
        return result
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        if path.is_dir() and not path.is_symlink():
            result[rel] = "<dir>"
        elif path.is_symlink():
            result[rel] = f"<link:{path.readlink()}>"
        else:
            stat_result = path.stat()
            digest = hashlib.sha256(path.read_bytes()).hexdigest()
            result[rel] = f"{stat_result.st_mtime_ns}:{digest}"
    return result


@pytest.fixture
def tree_snapshot() -> Callable[[Path], dict[str, str]]:
    return snapshot_tree


# ---------------------------------------------------------------------------
# Fake sea-orm-cli
# ---------------------------------------------------------------------------

@dataclass
class FakeRunner:
    """A ``ProcessRunner`` that records calls instead of spawning processes.

    ``files`` are written into ``cwd/<-o value>`` when the fake "runs", to
    mimic the generator producing entity sources.
    """

    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    files: dict[str, str] = field(default_factory=dict)
    raise_on_run: OSError | None = None
    calls: list[tuple[list[str], Path | None]] = field(default_factory=list)

    def run(self, args: list[str], cwd: Path | None = None) -> ProcessResult:
        self.calls.append((list(args), cwd))
        if self.raise_on_run is not None:
            raise self.raise_on_run
        if self.files and cwd is not None and "-o" in args:
            output = cwd / args[args.index("-o") + 1]
            output.mkdir(parents=True, exist_ok=True)
            for name, content in self.files.items():
                (output / name).write_text(content, encoding="utf-8")
        return ProcessResult(
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
            duration_seconds=0.25,
        )

    @property
    def last_args(self) -> list[str]:
        return self.calls[-1][0]


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    """The ``FakeRunner`` class, for tests that need a custom configuration."""
    return FakeRunner


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A fake generator that succeeds and writes two entities."""
    return FakeRunner(
        stdout="Generating users.rs\nGenerating posts.rs\n",
        files={
            "mod.rs": "pub mod prelude;\npub mod posts;\npub mod users;\n",
            "prelude.rs": "pub use super::users::Entity as Users;\n",
            "users.rs": "// users entity\n",
            "posts.rs": "// posts entity\n",
        },
    )
