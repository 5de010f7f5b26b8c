"""rext-core -- lifecycle manager for Rext application projects.

Determines whether a directory is a managed Rext project, scaffolds new
projects, destroys existing ones behind a safety gate, and drives
``sea-orm-cli`` to generate database entities.

Quick usage::

    from rext_core import Config, ProjectLifecycle

    lifecycle = ProjectLifecycle(Config(app_name="blog"))
    lifecycle.scaffold("/srv/apps/blog")
    lifecycle.generate_entities("/srv/apps/blog")
"""

from rext_core.config import Config, GeneratorConfig, RextModule, SafetyConfig
from rext_core.errors import ErrorKind, RextCoreError
from rext_core.lifecycle import (
    Operation,
    OperationOutcome,
    ProjectLifecycle,
    RollbackStatus,
    exit_code_for,
)
from rext_core.project import ProjectState, probe

__all__ = [
    "Config",
    "GeneratorConfig",
    "SafetyConfig",
    "RextModule",
    "ErrorKind",
    "RextCoreError",
    "Operation",
    "OperationOutcome",
    "ProjectLifecycle",
    "RollbackStatus",
    "exit_code_for",
    "ProjectState",
    "probe",
]
