"""Shared helpers: app-name cleanup, durations and rich console output."""

from __future__ import annotations

import re

from rich.console import Console

console = Console()

_NAME_SEPARATORS = re.compile(r"[^a-z0-9_-]+")


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


def sanitize_name(name: str) -> str:
    """Turn a directory or user supplied name into a Cargo-friendly app name.

    Runs of characters outside ``[a-z0-9_-]`` become a single hyphen.  Cargo
    package names must start with a letter, so leading digits, hyphens and
    underscores are dropped.  Returns ``""`` when nothing usable is left.

    Examples::

        sanitize_name("My Blog") -> "my-blog"
        sanitize_name("  shop (v2)  ") -> "shop-v2"
        sanitize_name("2fast") -> "fast"
    """
    cleaned = _NAME_SEPARATORS.sub("-", name.strip().lower())
    cleaned = re.sub(r"-{2,}", "-", cleaned)
    return cleaned.lstrip("-_0123456789").rstrip("-_")


def format_duration(seconds: float) -> str:
    """``3.7`` -> ``"3.7s"``, ``65.2`` -> ``"1m 5s"``, ``3661`` -> ``"1h 1m 1s"``."""
    seconds = max(seconds, 0.0)
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    console.print(f"[bold green]OK[/bold green] {message}")


def print_error(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_warning(message: str) -> None:
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")
