"""
Console output utilities for ngkeeper using Rich.

Everything the user is meant to read (status lines, the upgrade table,
prompts) goes through the shared console here. Diagnostics go through
:mod:`ngkeeper.utils.logger` instead.

Color is disabled when ``NO_COLOR`` or ``CI`` is set or stdout is not a
terminal. The CLI calls :func:`reconfigure_console` after changing
``NO_COLOR`` so the next output picks it up.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Mapping, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console
from rich.markup import escape

NGKEEPER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
    }
)

#: Markup colors for risk levels and update types.
RISK_COLORS: Mapping[str, str] = {"low": "green", "medium": "yellow", "high": "red"}
UPDATE_TYPE_COLORS: Mapping[str, str] = {
    "major": "red",
    "minor": "yellow",
    "patch": "green",
    "downgrade": "red",
    "update": "yellow",
}

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError, ValueError):
        return False


def _get_console() -> Console:
    """Return the shared Rich Console, creating it on first use."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                color = _should_use_color()
                _console = Console(
                    theme=NGKEEPER_THEME,
                    no_color=not color,
                    highlight=color,
                )
    return _console


def reconfigure_console() -> None:
    """Forget the shared console so the next call sees the current environment."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the shared Rich Console for output the helpers do not cover."""
    return _get_console()


# ---------------------------------------------------------------------------
# Status lines
# ---------------------------------------------------------------------------


def _print_status(message: str, prefix: str, style: str) -> None:
    _get_console().print(f"{prefix} {message}", style=style)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _print_status(message, prefix, "success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _print_status(message, prefix, "error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _print_status(message, prefix, "warning")


def print_info(message: str, *, prefix: str = "[INFO]") -> None:
    _print_status(message, prefix, "info")


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def print_table(
    rows: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Print row dictionaries as a Rich table.

    Args:
        rows: One mapping per row; nothing is printed when empty. Values may
            contain Rich markup.
        headers: Columns to show, in order. Defaults to the first row's keys.
        title: Table title.
        column_styles: Per column ``style``, ``justify``, ``no_wrap``,
            ``width`` and ``overflow`` settings.
    """
    if not rows:
        return

    columns = headers if headers is not None else list(rows[0])
    styles = column_styles or {}

    table = Table(title=title, show_header=True, header_style="bold")
    for name in columns:
        options = styles.get(name, {})
        table.add_column(
            name,
            style=options.get("style"),
            justify=options.get("justify", "default"),
            no_wrap=options.get("no_wrap", False),
            width=options.get("width"),
            overflow=options.get("overflow", "fold"),
        )

    for row in rows:
        table.add_row(*(str(row.get(name, "")) for name in columns))

    _get_console().print(table)


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Ask a yes/no question.

    ``y``/``yes`` and ``n``/``no`` are recognised case-insensitively; any
    other answer returns *default*. Ctrl+C or end of input declines.
    """
    console = _get_console()
    choices = escape("[Y/n]" if default else "[y/N]")
    console.print(f"{message} {choices}: ", end="", style="info")

    try:
        answer = input().strip().lower()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False

    if answer in ("y", "yes"):
        return True
    if answer in ("n", "no"):
        return False
    return default


# ---------------------------------------------------------------------------
# Markup helpers
# ---------------------------------------------------------------------------


def _colorize(label: str, colors: Mapping[str, str]) -> str:
    color = colors.get(label.lower())
    return f"[{color}]{label}[/{color}]" if color else label


def colorize_risk(risk: str) -> str:
    """Return Rich markup for a risk label (``low``/``medium``/``high``)."""
    return _colorize(risk, RISK_COLORS)


def colorize_update_type(update_type: str) -> str:
    """Return Rich markup for an update classification."""
    return _colorize(update_type, UPDATE_TYPE_COLORS)
