"""Jinja2 rendering of the bundled project templates.

Every file a project starts with lives under ``templates/`` next to this
module as ``<relative path>.j2``.  Rendering happens in memory only.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATE_SUFFIX = ".j2"

_BUNDLED_TEMPLATES = Path(__file__).parent / "templates"


def crate_name(app_name: str) -> str:
    """Rust identifier form of an app name (``blog-engine`` -> ``blog_engine``)."""
    return re.sub(r"[^a-z0-9_]", "_", app_name.lower())


def _quoted_list(values: Iterable[Any]) -> str:
    return ", ".join(f'"{value}"' for value in values)


class TemplateRenderer:
    """Renders project templates with a strict jinja2 environment.

    Undefined variables raise :class:`jinja2.UndefinedError` rather than
    rendering as empty strings, so a broken template fails the plan instead
    of producing a broken project.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else _BUNDLED_TEMPLATES
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["crate_name"] = crate_name
        self.env.filters["quoted_list"] = _quoted_list

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        return self.env.get_template(template_name).render(**context)

    def list_templates(self, prefix: str = "") -> list[str]:
        """Sorted template names (posix, relative to the template root) under *prefix*."""
        if not self.template_dir.is_dir():
            return []
        names = self.env.list_templates(extensions=[TEMPLATE_SUFFIX.lstrip(".")])
        if prefix:
            names = [n for n in names if n.startswith(prefix.rstrip("/") + "/")]
        return sorted(names)
