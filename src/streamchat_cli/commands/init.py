"""``streamchat init`` -- Write a starter configuration file."""

from __future__ import annotations

import click
import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt

from streamchat.config import DEFAULT_WEBHOOK_URL
from streamchat_cli.config import ConfigManager
from streamchat_cli.ui.panels import info_panel, success_panel


def init(
    webhook_url: str = typer.Option(  # noqa: B008
        "",
        "--webhook-url",
        "-u",
        help="Webhook endpoint. Prompted interactively if not supplied.",
    ),
    transport: str = typer.Option(  # noqa: B008
        "webhook",
        "--transport",
        "-t",
        help="Default transport for new sessions.",
        click_type=click.Choice(["webhook", "echo"]),
    ),
    project: bool = typer.Option(  # noqa: B008
        False,
        "--project",
        help="Write .streamchat/config.yaml in the current directory instead of the global file.",
    ),
    force: bool = typer.Option(  # noqa: B008
        False,
        "--force",
        "-f",
        help="Overwrite an existing file without asking.",
    ),
) -> None:
    """Create a streamchat configuration file."""
    console = Console()
    manager = ConfigManager()
    target = manager.project_config_path if project else manager.global_config_path

    info_panel("Configuration", f"Writing settings to [bold]{target}[/bold].", console=console)

    if not webhook_url and transport == "webhook":
        webhook_url = Prompt.ask(
            "[bold magenta]Webhook URL[/bold magenta]", default=DEFAULT_WEBHOOK_URL, console=console
        )

    if target.exists() and not force:
        overwrite = Confirm.ask(
            f"[bold yellow]{target}[/bold yellow] already exists. Overwrite?",
            default=False,
            console=console,
        )
        if not overwrite:
            console.print(f"  [dim]Skipped:[/dim] {target}")
            raise typer.Exit

    data = manager.build_default_config(
        webhook_url=webhook_url or DEFAULT_WEBHOOK_URL, transport=transport
    )
    written = manager.save_project(data) if project else manager.save_global(data)
    console.print(f"  [green]Wrote:[/green] {written}")
    console.print()
    source = data["webhook_url"] if transport == "webhook" else "the local echo responder"
    success_panel("Done", f"Replies will come from [bold]{source}[/bold].", console=console)
