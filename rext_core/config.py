"""rext-core configuration.

Typed configuration for the project lifecycle operations.  All settings use
Pydantic v2 models so they are validated at construction time and can be
serialised to/from JSON or read from environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Tables owned by the framework itself: the job queue/scheduler storage and
# the migration bookkeeping tables.  Entities are never generated for them.
RESERVED_TABLES: tuple[str, ...] = (
    "jobs",
    "workers",
    "seaql_migrations",
    "_sqlx_migrations",
)

DEFAULT_APP_NAME = "my-rext-app"


class RextModule(str, Enum):
    """Feature modules a project can be scaffolded with.

    ``core`` is always present; the others add files on top of it.
    """

    CORE = "core"
    ADMIN = "admin"
    QUEUE = "queue"
    EMAIL = "email"
    VUE = "vue"


class GeneratorConfig(BaseModel):
    """Settings for the external ``sea-orm-cli`` entity generator."""

    binary: str = Field(default="sea-orm-cli", min_length=1)
    database_url: str | None = Field(
        default=None,
        description="Connection string; when unset the generator reads the project's .env",
    )
    exclude_tables: list[str] = Field(
        default_factory=list,
        description="Tables to skip in addition to RESERVED_TABLES",
    )

    def excluded_tables(self, extra: str | Iterable[str] = ()) -> tuple[str, ...]:
        """Return reserved, configured and *extra* exclusions, de-duplicated in order.

        A plain string in *extra* is one table name, not a sequence of them.
        """
        if isinstance(extra, str):
            extra = (extra,)
        merged: list[str] = []
        for table in (*RESERVED_TABLES, *self.exclude_tables, *extra):
            table = table.strip()
            if table and table not in merged:
                merged.append(table)
        return tuple(merged)


class SafetyConfig(BaseModel):
    """Guards applied before any destructive operation."""

    min_depth: int = Field(
        default=2,
        ge=1,
        description="Minimum number of path components below the filesystem root",
    )


class Config(BaseModel):
    """Global rext-core configuration.

    Instances are created once by the CLI layer (or :meth:`from_env`) and
    passed to :class:`~rext_core.lifecycle.ProjectLifecycle`.
    """

    app_name: str = Field(default="")
    modules: list[RextModule] = Field(default_factory=lambda: [RextModule.CORE])
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    safety: SafetyConfig = Field(default_factory=SafetyConfig)

    @field_validator("modules")
    @classmethod
    def _core_always_enabled(cls, modules: list[RextModule]) -> list[RextModule]:
        ordered = [RextModule.CORE]
        for module in modules:
            if module not in ordered:
                ordered.append(module)
        return ordered

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file.  Parent directories are created.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            REXT_APP_NAME, REXT_MODULES (comma separated), DATABASE_URL,
            REXT_SEA_ORM_CLI, REXT_EXCLUDE_TABLES (comma separated),
            REXT_MIN_DEPTH.
        """
        generator_kwargs: dict[str, Any] = {}
        if os.environ.get("DATABASE_URL"):
            generator_kwargs["database_url"] = os.environ["DATABASE_URL"]
        if os.environ.get("REXT_SEA_ORM_CLI"):
            generator_kwargs["binary"] = os.environ["REXT_SEA_ORM_CLI"]
        if os.environ.get("REXT_EXCLUDE_TABLES"):
            generator_kwargs["exclude_tables"] = _split_csv(os.environ["REXT_EXCLUDE_TABLES"])

        safety_kwargs: dict[str, Any] = {}
        if os.environ.get("REXT_MIN_DEPTH"):
            safety_kwargs["min_depth"] = int(os.environ["REXT_MIN_DEPTH"])

        modules = _split_csv(os.environ.get("REXT_MODULES", "core"))

        return cls(
            app_name=os.environ.get("REXT_APP_NAME", ""),
            modules=[RextModule(m) for m in modules],
            generator=GeneratorConfig(**generator_kwargs),
            safety=SafetyConfig(**safety_kwargs),
        )


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]
