"""Entity generation through ``sea-orm-cli``.

Builds the ``sea-orm-cli generate entity`` invocation for a project, runs it
through a :class:`~rext_core.entities.runner.ProcessRunner`, and turns the
outcome into a :class:`GenerationReport` or a
:class:`~rext_core.errors.SeaOrmCliGenerateEntitiesError`.

The output directory is always ``backend/entity/models`` under the project
root, the same constant the scaffolder creates.  Whatever the generator leaves
in that directory after a failure is not touched.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from rich.panel import Panel
from rich.table import Table

from rext_core.config import Config
from rext_core.errors import (
    ForeignContentsError,
    SafetyCheckError,
    SeaOrmCliGenerateEntitiesError,
)
from rext_core.project.layout import ENTITY_OUTPUT_DIR
from rext_core.project.prober import ProjectState, probe
from rext_core.project.safety import resolve_project_root
from rext_core.utils import console, format_duration

from .runner import ProcessRunner, SubprocessRunner

ENTITY_SUFFIX = ".rs"


@dataclass(frozen=True)
class GenerationRequest:
    """Parameters of one generator invocation."""

    project_root: Path
    exclude_tables: tuple[str, ...]
    database_url: str | None = None

    @property
    def output_dir(self) -> Path:
        return self.project_root.joinpath(*ENTITY_OUTPUT_DIR.parts)

    def to_args(self, binary: str) -> list[str]:
        """Command line, relative to the project root."""
        args = [
            binary,
            "generate",
            "entity",
            "-o",
            ENTITY_OUTPUT_DIR.as_posix(),
            "--ignore-tables",
            ",".join(self.exclude_tables),
        ]
        if self.database_url:
            args += ["-u", self.database_url]
        return args


@dataclass
class GenerationReport:
    """Structured result of a successful generation."""

    output_dir: Path
    files_written: list[Path] = field(default_factory=list)
    stale_files: list[Path] = field(default_factory=list)
    excluded_tables: tuple[str, ...] = ()
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_seconds: float = 0.0

    def summary(self) -> str:
        """Return a human-readable summary of the report."""
        lines = [
            f"Output: {self.output_dir}",
            f"Duration: {format_duration(self.duration_seconds)}",
            f"Files written: {len(self.files_written)}",
            f"Excluded tables: {', '.join(self.excluded_tables)}",
        ]
        if self.stale_files:
            lines.append(f"Stale files left in place: {len(self.stale_files)}")
            for path in self.stale_files[:5]:
                lines.append(f"  - {path.name}")
        return "\n".join(lines)


class EntityGenerator:
    """Runs ``sea-orm-cli`` to generate entity sources for a project."""

    def __init__(
        self,
        config: Config | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.config = config or Config()
        self.runner = runner or SubprocessRunner()

    def build_request(
        self, root: Path, exclude_tables: Iterable[str] = ()
    ) -> GenerationRequest:
        """A single table name may be passed as a plain string."""
        return GenerationRequest(
            project_root=root,
            exclude_tables=self.config.generator.excluded_tables(exclude_tables),
            database_url=self.config.generator.database_url,
        )

    def generate(
        self,
        path: str | Path | None = None,
        exclude_tables: Iterable[str] = (),
    ) -> GenerationReport:
        """Generate entities into ``backend/entity/models``.

        Args:
            path: Project root (default: working directory).
            exclude_tables: Extra tables to skip; the reserved scheduler and
                migration tables are always skipped.

        Raises:
            SafetyCheckError: No project exists at the path.
            ForeignContentsError: The directory holds something other than a
                Rext app.
            SeaOrmCliGenerateEntitiesError: The generator could not be
                started, exited non-zero, wrote no entity files, or wrote an
                entity for an excluded table.
        """
        root = resolve_project_root(path)
        state = probe(root)
        if state is ProjectState.FOREIGN:
            raise ForeignContentsError(
                f"Refusing to generate entities in {root}: it is not a Rext app",
                path=root,
            )
        if state is ProjectState.ABSENT:
            # Writing entities here would turn an empty directory FOREIGN.
            raise SafetyCheckError(
                f"No Rext app found at {root}; scaffold it before generating entities",
                path=root,
            )

        request = self.build_request(root, exclude_tables)
        args = request.to_args(self.config.generator.binary)
        command = _display_command(args)

        before = _snapshot(request.output_dir, command)

        console.print(f"[cyan]Generating entities:[/cyan] [dim]{command}[/dim]")
        try:
            result = self.runner.run(args, cwd=root)
        except OSError as exc:
            raise SeaOrmCliGenerateEntitiesError(
                f"Failed to execute sea-orm-cli generate entities command: "
                f"could not start '{args[0]}': {exc}",
                path=request.output_dir,
                command=command,
            ) from exc

        if not result.ok:
            detail = result.stderr.strip() or result.stdout.strip() or "no output"
            raise SeaOrmCliGenerateEntitiesError(
                f"Failed to execute sea-orm-cli generate entities command: "
                f"exit {result.returncode}: {detail}",
                path=request.output_dir,
                command=command,
                stderr=result.stderr,
            )

        after = _snapshot(request.output_dir, command)
        written = sorted(p for p, digest in after.items() if before.get(p) != digest)
        if not written:
            raise SeaOrmCliGenerateEntitiesError(
                "Failed to execute sea-orm-cli generate entities command: "
                f"it exited successfully but wrote no entity files to {request.output_dir}",
                path=request.output_dir,
                command=command,
                stderr=result.stderr,
            )

        excluded = set(request.exclude_tables)
        shadowing = [p for p in written if p.stem in excluded]
        if shadowing:
            names = ", ".join(p.name for p in shadowing)
            raise SeaOrmCliGenerateEntitiesError(
                "Failed to execute sea-orm-cli generate entities command: "
                f"entities were generated for excluded tables: {names}",
                path=request.output_dir,
                command=command,
                stderr=result.stderr,
            )

        report = GenerationReport(
            output_dir=request.output_dir,
            files_written=written,
            stale_files=sorted(set(after) - set(written)),
            excluded_tables=request.exclude_tables,
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            duration_seconds=result.duration_seconds,
        )
        self._display_report(report)
        return report

    def check_available(self) -> bool:
        """Return ``True`` if the generator binary runs (``--version``)."""
        binary = self.config.generator.binary
        try:
            result = self.runner.run([binary, "--version"])
        except OSError:
            console.print(f"[red]sea-orm-cli not available:[/red] '{binary}' not found in PATH.")
            return False
        if not result.ok:
            console.print(f"[red]sea-orm-cli not usable:[/red] {result.stderr.strip()}")
            return False
        console.print(f"[green]sea-orm-cli available:[/green] {result.stdout.strip()}")
        return True

    def _display_report(self, report: GenerationReport) -> None:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Key", style="bold")
        table.add_column("Value")
        table.add_row("Output", str(report.output_dir))
        table.add_row("Duration", format_duration(report.duration_seconds))
        table.add_row("Files Written", str(len(report.files_written)))
        table.add_row("Stale Files", str(len(report.stale_files)))
        console.print(Panel(table, title="Entities Generated", border_style="green"))


def _snapshot(output_dir: Path, command: str) -> dict[Path, str]:
    """Map each entity file in *output_dir* to a fingerprint of its state."""
    if not output_dir.is_dir():
        return {}
    fingerprints: dict[Path, str] = {}
    try:
        for path in output_dir.iterdir():
            if path.suffix != ENTITY_SUFFIX or not path.is_file():
                continue
            stat_result = path.stat()
            digest = hashlib.sha256(path.read_bytes()).hexdigest()
            fingerprints[path] = f"{stat_result.st_mtime_ns}:{digest}"
    except OSError as exc:
        raise SeaOrmCliGenerateEntitiesError(
            f"Failed to inspect entity output directory {output_dir}: {exc}",
            path=output_dir,
            command=command,
        ) from exc
    return fingerprints


def _display_command(args: list[str]) -> str:
    """Join *args* for messages, hiding the database URL (it may hold a password)."""
    shown: list[str] = []
    hide_next = False
    for arg in args:
        shown.append("***" if hide_next else arg)
        hide_next = arg == "-u"
    return " ".join(shown)
