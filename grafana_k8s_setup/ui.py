"""Colorized console output for the installer.

Thin wrapper around :mod:`rich` that degrades gracefully when stdout
is not a TTY (e.g. piped, CI).  All user-facing status messages
should flow through this module; ``logger.*`` calls are kept for
diagnostics under ``--debug``.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

# Shared console; force_terminal=None lets Rich detect the TTY.
console = Console(stderr=False, force_terminal=None)

# ── Symbols ────────────────────────────────────────────────────────────────

_PASS = "[bold green]✓[/]"
_FAIL = "[bold red]✗[/]"
_WARN = "[bold yellow]⚠[/]"
_ARROW = "[bold cyan]›[/]"
_DOT = "[dim]·[/]"

# ── Phase headers ──────────────────────────────────────────────────────────


def banner(title: str) -> None:
    """Opening banner for a run."""
    console.print()
    console.print(
        Panel(f"[bold green]{title}[/]", border_style="green", expand=False)
    )


def phase(title: str) -> None:
    """Print a bold phase header (e.g. ``CONFIGURATION``, ``INSTALL``)."""
    console.print()
    console.print(f"[bold blue]── {title} ──[/]")


# ── Status lines ───────────────────────────────────────────────────────────


def ok(msg: str) -> None:
    """Green checkmark + message."""
    console.print(f"  {_PASS} {msg}")


def fail(msg: str) -> None:
    """Red cross + message."""
    console.print(f"  {_FAIL} [red]{msg}[/]")


def warn(msg: str) -> None:
    """Yellow warning + message."""
    console.print(f"  {_WARN} [yellow]{escape(msg)}[/]")


def step(msg: str) -> None:
    """Cyan arrow + action message (in-progress)."""
    console.print(f"  {_ARROW} {msg}")


def info(msg: str) -> None:
    """Dim dot + informational message."""
    console.print(f"  {_DOT} [dim]{msg}[/]")


def error_msg(msg: str) -> None:
    """Bold red error message (not indented)."""
    console.print(f"[bold red]ERROR:[/] {escape(msg)}")


def command_output(text: str) -> None:
    """Echo captured subprocess output verbatim (no markup)."""
    if text:
        console.print(text, markup=False, highlight=False)


# ── Tables / panels ───────────────────────────────────────────────────────


def summary_table(title: str, rows: Iterable[Tuple[str, str]]) -> None:
    """Two-column key/value table."""
    table = Table(title=title, show_header=False, title_justify="left")
    table.add_column(style="bold")
    table.add_column()
    for key, value in rows:
        table.add_row(escape(key), escape(value))
    console.print()
    console.print(table)


def success_panel(title: str, body: str) -> None:
    """Green-bordered success panel."""
    console.print()
    console.print(
        Panel(
            body,
            title=f"[bold green]{title}[/]",
            border_style="green",
            padding=(1, 2),
        )
    )
