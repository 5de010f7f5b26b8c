"""Entity generation through the external ``sea-orm-cli`` tool."""

from .generator import EntityGenerator, GenerationReport, GenerationRequest
from .runner import ProcessResult, ProcessRunner, SubprocessRunner

__all__ = [
    "EntityGenerator",
    "GenerationReport",
    "GenerationRequest",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
]
