"""Project filesystem lifecycle: probe, safety gate, scaffold and destroy.

Key pieces:
    layout            - Sentinel set, scaffold plan and entity output path
    probe             - Classify a directory as absent / valid / foreign
    authorize_*       - Safety gate run before scaffold and destroy
    ProjectScaffolder - Create a project skeleton with rollback
    ProjectDestroyer  - Remove a project bottom-up
"""

from .destroyer import DestroyResult, ProjectDestroyer
from .layout import (
    ENTITY_OUTPUT_DIR,
    SENTINELS,
    ScaffoldEntry,
    ScaffoldPlan,
    Sentinel,
    build_scaffold_plan,
)
from .prober import ProjectState, probe
from .safety import authorize_destroy, authorize_scaffold, resolve_project_root
from .scaffolder import ProjectScaffolder, ScaffoldResult
from .templates import TemplateRenderer

__all__ = [
    # Layout
    "ENTITY_OUTPUT_DIR",
    "SENTINELS",
    "Sentinel",
    "ScaffoldEntry",
    "ScaffoldPlan",
    "build_scaffold_plan",
    "TemplateRenderer",
    # Probe and gate
    "ProjectState",
    "probe",
    "resolve_project_root",
    "authorize_scaffold",
    "authorize_destroy",
    # Operations
    "ProjectScaffolder",
    "ScaffoldResult",
    "ProjectDestroyer",
    "DestroyResult",
]
