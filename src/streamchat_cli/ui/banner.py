"""Banner shown by ``streamchat --version``."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from streamchat._version import __version__

BANNER = r"""
         _                            _           _
     ___| |_ _ __ ___  __ _ _ __ ___ | |__   __ _| |_
    / __| __| '__/ _ \/ _` | '_ ` _ \| '_ \ / _` | __|
    \__ \ |_| | |  __/ (_| | | | | | | | | | (_| | |_
    |___/\__|_|  \___|\__,_|_| |_| |_|_| |_|\__,_|\__|
"""


def show_banner(console: Console | None = None) -> None:
    console = console or Console()
    console.print(Text(BANNER, style="bold magenta"))
    console.print(f"  [bold]Webhook chat in your terminal[/bold]  [dim]v{__version__}[/dim]")
    console.print()
