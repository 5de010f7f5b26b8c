"""Tests for ProjectScaffolder (rext_core.project.scaffolder).

Covers:
- Successful scaffold into a missing or empty directory
- Refusal on existing projects and foreign contents with zero writes
- Rollback after injected directory or file failures
- Rollback problems reported on the raised error
"""

from __future__ import annotations

from pathlib import Path

import pytest

from rext_core.config import DEFAULT_APP_NAME, Config, RextModule
from rext_core.errors import (
    AppAlreadyExistsError,
    DirectoryCreationError,
    FileWriteError,
    ForeignContentsError,
)
from rext_core.project import scaffolder as scaffolder_module
from rext_core.project.layout import SENTINELS
from rext_core.project.prober import ProjectState, probe
from rext_core.project.scaffolder import ProjectScaffolder

pytestmark = pytest.mark.unit


def _fail_on_call(number: int, real, make_error):
    """Wrap *real* so that its *number*-th call raises ``make_error(path)``."""
    state = {"calls": 0}

    def wrapper(path: Path, *args):
        state["calls"] += 1
        if state["calls"] == number:
            raise make_error(path)
        return real(path, *args)

    return wrapper


class TestScaffold:
    def test_missing_directory_becomes_valid(self, tmp_path):
        target = tmp_path / "app1"
        result = ProjectScaffolder(Config(app_name="app1")).scaffold(target)

        assert probe(target) is ProjectState.VALID
        assert result.root == target.resolve()
        assert result.directories_created[0] == target.resolve()

    def test_missing_parents_are_created(self, tmp_path):
        target = tmp_path / "projects" / "new" / "app"
        result = ProjectScaffolder().scaffold(target)

        assert probe(target) is ProjectState.VALID
        base = tmp_path.resolve()
        assert result.directories_created[:3] == [
            base / "projects",
            base / "projects" / "new",
            base / "projects" / "new" / "app",
        ]

    def test_empty_directory_becomes_valid(self, empty_dir):
        result = ProjectScaffolder().scaffold(empty_dir)
        assert probe(empty_dir) is ProjectState.VALID
        # The root already existed and is not claimed.
        assert empty_dir.resolve() not in result.directories_created

    def test_every_sentinel_is_created(self, empty_dir):
        ProjectScaffolder().scaffold(empty_dir)
        for sentinel in SENTINELS:
            target = empty_dir.joinpath(*sentinel.path.parts)
            assert target.is_dir() if sentinel.is_dir else target.is_file()

    def test_entity_directory_is_empty(self, entity_dir):
        assert entity_dir.is_dir()
        assert list(entity_dir.iterdir()) == []

    def test_result_counts_match_plan(self, empty_dir):
        scaffolder = ProjectScaffolder(Config(modules=list(RextModule)))
        plan = scaffolder.plan(empty_dir)
        result = scaffolder.scaffold(empty_dir)
        assert len(result.files_written) == len(plan.files)
        assert len(result.directories_created) == len(plan.directories)
        assert "files" in result.summary()

    def test_modules_are_honoured(self, empty_dir):
        ProjectScaffolder(Config(modules=[RextModule.EMAIL])).scaffold(empty_dir)
        assert (empty_dir / "backend/infrastructure/email.rs").is_file()
        assert not (empty_dir / "backend/infrastructure/job_queue.rs").exists()
        assert 'modules = ["core", "email"]' in (empty_dir / "rext.toml").read_text()

    def test_relative_path_uses_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        ProjectScaffolder().scaffold("relative-app")
        assert probe(tmp_path / "relative-app") is ProjectState.VALID


class TestRefusals:
    def test_existing_project(self, scaffolded_project, tree_snapshot):
        before = tree_snapshot(scaffolded_project)
        with pytest.raises(AppAlreadyExistsError):
            ProjectScaffolder().scaffold(scaffolded_project)
        assert tree_snapshot(scaffolded_project) == before

    def test_foreign_contents(self, foreign_dir, tree_snapshot):
        before = tree_snapshot(foreign_dir)
        with pytest.raises(ForeignContentsError):
            ProjectScaffolder().scaffold(foreign_dir)
        assert tree_snapshot(foreign_dir) == before

    def test_path_is_a_file(self, tmp_path):
        target = tmp_path / "README"
        target.write_text("hello\n", encoding="utf-8")
        with pytest.raises(ForeignContentsError):
            ProjectScaffolder().scaffold(target)
        assert target.read_text(encoding="utf-8") == "hello\n"


class TestRollback:
    def test_file_failure_restores_missing_root(self, tmp_path, monkeypatch):
        target = tmp_path / "app1"
        monkeypatch.setattr(
            scaffolder_module,
            "_write_file",
            _fail_on_call(
                3,
                scaffolder_module._write_file,
                lambda p: FileWriteError(f"Failed to write file {p}: denied", path=p),
            ),
        )

        with pytest.raises(FileWriteError) as exc_info:
            ProjectScaffolder().scaffold(target)

        assert exc_info.value.rollback_clean
        assert not target.exists()
        assert probe(target) is ProjectState.ABSENT

    def test_file_failure_removes_created_parents(self, tmp_path, monkeypatch):
        outer = tmp_path / "a"
        monkeypatch.setattr(
            scaffolder_module,
            "_write_file",
            _fail_on_call(
                3,
                scaffolder_module._write_file,
                lambda p: FileWriteError("denied", path=p),
            ),
        )

        with pytest.raises(FileWriteError) as exc_info:
            ProjectScaffolder().scaffold(outer / "b" / "app")

        assert exc_info.value.rollback_clean
        assert not outer.exists()
        assert list(tmp_path.iterdir()) == []

    def test_file_failure_empties_existing_root(self, empty_dir, monkeypatch):
        monkeypatch.setattr(
            scaffolder_module,
            "_write_file",
            _fail_on_call(
                3,
                scaffolder_module._write_file,
                lambda p: FileWriteError("denied", path=p),
            ),
        )

        with pytest.raises(FileWriteError):
            ProjectScaffolder().scaffold(empty_dir)

        assert empty_dir.is_dir()
        assert list(empty_dir.iterdir()) == []
        assert probe(empty_dir) is ProjectState.ABSENT

    def test_partially_written_file_is_removed(self, empty_dir, monkeypatch):
        def write_then_fail(path: Path, content: str) -> None:
            if path.name == "Cargo.toml" and path.parent == empty_dir.resolve():
                path.write_text(content[:5], encoding="utf-8")
                raise FileWriteError("disk full", path=path)
            path.write_text(content, encoding="utf-8")

        monkeypatch.setattr(scaffolder_module, "_write_file", write_then_fail)

        with pytest.raises(FileWriteError):
            ProjectScaffolder().scaffold(empty_dir)

        assert list(empty_dir.iterdir()) == []

    def test_unexpected_existing_file_is_not_claimed(self, empty_dir, monkeypatch):
        survivor = {}

        def race(path: Path, content: str) -> None:
            if path.name == "example.env":
                # Another writer created this file first.
                path.write_text("theirs\n", encoding="utf-8")
                survivor["path"] = path
                raise FileExistsError(17, "File exists", str(path))
            path.write_text(content, encoding="utf-8")

        monkeypatch.setattr(scaffolder_module, "_write_file", race)

        with pytest.raises(FileWriteError, match="already exists") as exc_info:
            ProjectScaffolder().scaffold(empty_dir)

        assert exc_info.value.rollback_clean
        assert survivor["path"].read_text(encoding="utf-8") == "theirs\n"
        assert [p.name for p in empty_dir.iterdir()] == ["example.env"]

    def test_directory_failure_restores_missing_root(self, tmp_path, monkeypatch):
        target = tmp_path / "app1"
        monkeypatch.setattr(
            scaffolder_module,
            "_make_directory",
            _fail_on_call(
                4,
                scaffolder_module._make_directory,
                lambda p: DirectoryCreationError(f"Failed to create directory {p}", path=p),
            ),
        )

        with pytest.raises(DirectoryCreationError) as exc_info:
            ProjectScaffolder().scaffold(target)

        assert exc_info.value.rollback_clean
        assert not target.exists()

    def test_rollback_problems_are_reported(self, empty_dir, monkeypatch):
        stuck = empty_dir.resolve() / "rext.toml"
        real_unlink = Path.unlink

        def unlink(self, missing_ok=False):
            if self == stuck:
                raise PermissionError(13, "Permission denied", str(self))
            return real_unlink(self, missing_ok=missing_ok)

        monkeypatch.setattr(Path, "unlink", unlink)
        monkeypatch.setattr(
            scaffolder_module,
            "_write_file",
            _fail_on_call(
                3,
                scaffolder_module._write_file,
                lambda p: FileWriteError("denied", path=p),
            ),
        )

        with pytest.raises(FileWriteError) as exc_info:
            ProjectScaffolder().scaffold(empty_dir)

        error = exc_info.value
        assert not error.rollback_clean
        assert any(str(stuck) in problem for problem in error.rollback_errors)
        # The original failure is still the one raised.
        assert str(error) == "denied"
        assert stuck.exists()


class TestAppName:
    def test_configured_name_wins(self):
        scaffolder = ProjectScaffolder(Config(app_name="My Shop"))
        assert scaffolder.app_name_for(Path("/srv/apps/other")) == "my-shop"

    def test_directory_name_is_fallback(self):
        assert ProjectScaffolder().app_name_for(Path("/srv/apps/Blog Engine")) == "blog-engine"

    def test_default_name_when_nothing_usable(self):
        assert ProjectScaffolder().app_name_for(Path("/srv/apps/!!!")) == DEFAULT_APP_NAME

    def test_name_rendered_into_files(self, tmp_path):
        target = tmp_path / "Fancy App"
        ProjectScaffolder().scaffold(target)
        assert 'name = "fancy-app"' in (target / "Cargo.toml").read_text(encoding="utf-8")
