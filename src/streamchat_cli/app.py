"""Main Typer application for the streamchat CLI."""

from __future__ import annotations

import typer

from streamchat_cli.commands.check import check
from streamchat_cli.commands.init import init
from streamchat_cli.commands.send import send
from streamchat_cli.logging_setup import configure_logging

app = typer.Typer(
    name="streamchat",
    help="Streamchat -- chat with a webhook-backed assistant from the terminal.",
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from streamchat_cli.ui.banner import show_banner

        show_banner()
        raise typer.Exit


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(  # noqa: B008
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    webhook_url: str | None = typer.Option(  # noqa: B008
        None,
        "--webhook-url",
        "-u",
        help="Webhook endpoint (overrides config and environment).",
    ),
    local: bool = typer.Option(  # noqa: B008
        False,
        "--local",
        help="Use the offline echo responder instead of the webhook.",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False,
        "--verbose",
        "-v",
        help="Log debug output (to the Textual console when the TUI is running).",
    ),
) -> None:
    """Streamchat -- chat with a webhook-backed assistant from the terminal."""
    configure_logging(verbose=verbose, interactive=ctx.invoked_subcommand is None)
    if ctx.invoked_subcommand is None:
        from streamchat_cli.config import ConfigManager
        from streamchat_cli.tui import StreamchatApp

        config = ConfigManager().load(
            overrides={"webhook_url": webhook_url, "transport": "echo" if local else None}
        )
        StreamchatApp(config=config).run()


app.command(name="send")(send)
app.command(name="init")(init)
app.command(name="check")(check)
