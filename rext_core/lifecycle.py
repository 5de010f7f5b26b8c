"""Lifecycle facade consumed by the CLI layer.

Exposes the four operations (``check``, ``scaffold``, ``destroy``,
``generate_entities``) as plain synchronous calls that raise typed errors, and
:meth:`ProjectLifecycle.run` which wraps any of them into an
:class:`OperationOutcome` the CLI can print and turn into an exit code.

The working directory is re-resolved on every call; nothing about the
filesystem is remembered between operations.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from rext_core.config import Config
from rext_core.entities.generator import EntityGenerator, GenerationReport
from rext_core.entities.runner import ProcessRunner
from rext_core.errors import ErrorKind, RextCoreError
from rext_core.project.destroyer import DestroyResult, ProjectDestroyer
from rext_core.project.prober import ProjectState, probe
from rext_core.project.safety import resolve_project_root
from rext_core.project.scaffolder import ProjectScaffolder, ScaffoldResult
from rext_core.utils import print_error, print_success, print_warning

# Process exit codes per error kind.  0 is success, 1 is reserved for
# unexpected failures outside this taxonomy.
EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.DIRECTORY_CREATION: 10,
    ErrorKind.FILE_WRITE: 11,
    ErrorKind.APP_ALREADY_EXISTS: 12,
    ErrorKind.FOREIGN_CONTENTS: 13,
    ErrorKind.CURRENT_DIR: 14,
    ErrorKind.DIRECTORY_READ: 15,
    ErrorKind.FILE_REMOVAL: 16,
    ErrorKind.DIRECTORY_REMOVAL: 17,
    ErrorKind.SAFETY_CHECK: 18,
    ErrorKind.SEA_ORM_CLI_GENERATE_ENTITIES: 19,
}


def exit_code_for(kind: ErrorKind | None) -> int:
    """Return the process exit code for an error kind (``None`` means success)."""
    if kind is None:
        return 0
    return EXIT_CODES.get(kind, 1)


class Operation(str, Enum):
    CHECK = "check"
    SCAFFOLD = "scaffold"
    DESTROY = "destroy"
    GENERATE_ENTITIES = "generate-entities"


class RollbackStatus(str, Enum):
    """Whether a failed operation left partial output behind."""

    NOT_NEEDED = "not_needed"
    CLEAN = "clean"
    INCOMPLETE = "incomplete"


@dataclass
class OperationOutcome:
    """Result of one lifecycle operation, success or failure."""

    operation: Operation
    success: bool
    messages: list[str] = field(default_factory=list)
    error_kind: ErrorKind | None = None
    error_message: str = ""
    error_path: Path | None = None
    stderr: str = ""
    rollback: RollbackStatus = RollbackStatus.NOT_NEEDED
    rollback_errors: list[str] = field(default_factory=list)
    value: Any = None

    @property
    def exit_code(self) -> int:
        return exit_code_for(self.error_kind)

    @property
    def manual_cleanup_required(self) -> bool:
        return self.rollback is RollbackStatus.INCOMPLETE

    @classmethod
    def from_error(cls, operation: Operation, error: RextCoreError) -> "OperationOutcome":
        if not error.rollback_attempted:
            # Refused by the gate or failed before creating anything.
            rollback = RollbackStatus.NOT_NEEDED
        elif error.rollback_clean:
            rollback = RollbackStatus.CLEAN
        else:
            rollback = RollbackStatus.INCOMPLETE
        return cls(
            operation=operation,
            success=False,
            error_kind=error.kind,
            error_message=str(error),
            error_path=error.path,
            stderr=error.stderr,
            rollback=rollback,
            rollback_errors=list(error.rollback_errors),
        )


class ProjectLifecycle:
    """Entry point for check / scaffold / destroy / generate-entities.

    Usage::

        lifecycle = ProjectLifecycle(Config.from_env())
        outcome = lifecycle.run(Operation.SCAFFOLD, "/srv/apps/blog")
        sys.exit(outcome.exit_code)
    """

    def __init__(
        self,
        config: Config | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.config = config or Config()
        self.scaffolder = ProjectScaffolder(self.config)
        self.destroyer = ProjectDestroyer(self.config)
        self.generator = EntityGenerator(self.config, runner)

    # -- Operations --------------------------------------------------------

    def check(self, path: str | Path | None = None) -> ProjectState:
        """Classify the project root at *path* (default: working directory)."""
        return probe(resolve_project_root(path))

    def scaffold(self, path: str | Path | None = None) -> ScaffoldResult:
        return self.scaffolder.scaffold(path)

    def destroy(self, path: str | Path | None = None) -> DestroyResult:
        return self.destroyer.destroy(path)

    def generate_entities(
        self,
        path: str | Path | None = None,
        exclude_tables: Iterable[str] = (),
    ) -> GenerationReport:
        return self.generator.generate(path, exclude_tables)

    # -- Outcome wrapper ---------------------------------------------------

    def run(
        self,
        operation: Operation | str,
        path: str | Path | None = None,
        **kwargs: Any,
    ) -> OperationOutcome:
        """Run *operation* and capture its result as an :class:`OperationOutcome`.

        Only :class:`~rext_core.errors.RextCoreError` is converted; anything
        else is a bug and propagates.
        """
        operation = Operation(operation)
        handlers: dict[Operation, Callable[..., Any]] = {
            Operation.CHECK: self.check,
            Operation.SCAFFOLD: self.scaffold,
            Operation.DESTROY: self.destroy,
            Operation.GENERATE_ENTITIES: self.generate_entities,
        }

        try:
            value = handlers[operation](path, **kwargs)
        except RextCoreError as exc:
            outcome = OperationOutcome.from_error(operation, exc)
            print_error(f"{operation.value} failed: {exc}")
            if outcome.manual_cleanup_required:
                print_warning("Partial output could not be removed; manual cleanup required.")
            return outcome

        outcome = OperationOutcome(
            operation=operation,
            success=True,
            messages=[_describe(value)],
            value=value,
        )
        print_success(outcome.messages[0])
        return outcome


def _describe(value: Any) -> str:
    if isinstance(value, ProjectState):
        return f"Project state: {value.value}"
    if isinstance(value, GenerationReport):
        return f"Generated {len(value.files_written)} entity files in {value.output_dir}"
    return value.summary()
