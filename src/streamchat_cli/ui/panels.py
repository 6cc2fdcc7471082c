"""Rich output helpers shared by the non-interactive commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence

# -- Palette (mirrors the TUI theme) --
ACCENT = "magenta"
HEADING = "bold magenta"
SUCCESS = "bold green"
ERROR = "bold red"
DIM = "dim"

_BORDERS = {HEADING: ACCENT, SUCCESS: "green", ERROR: "red"}


def get_console() -> Console:
    return Console()


def _panel(title: str, body: str, style: str, console: Console | None) -> None:
    console = console or get_console()
    console.print(
        Panel(body, title=f"[{style}]{title}[/{style}]", border_style=_BORDERS[style], expand=False)
    )


def info_panel(title: str, body: str, *, console: Console | None = None) -> None:
    _panel(title, body, HEADING, console)


def success_panel(title: str, body: str, *, console: Console | None = None) -> None:
    _panel(title, body, SUCCESS, console)


def error_panel(title: str, body: str, *, console: Console | None = None) -> None:
    _panel(title, body, ERROR, console)


def status_table(
    title: str,
    rows: Sequence[tuple[str, str, str]],
    *,
    console: Console | None = None,
) -> None:
    """Print (check, status, details) rows as a table."""
    console = console or get_console()
    table = Table(title=f"[{HEADING}]{title}[/{HEADING}]", border_style=ACCENT, expand=False)
    table.add_column("Check", style="bold white", min_width=22)
    table.add_column("Status", justify="center", min_width=8)
    table.add_column("Details", style=DIM)
    for name, status, detail in rows:
        table.add_row(name, status, detail)
    console.print(table)
