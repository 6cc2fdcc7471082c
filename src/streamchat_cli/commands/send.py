"""``streamchat send`` -- Run a single exchange from the shell."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live
from rich.text import Text

from streamchat.config import StreamchatConfig
from streamchat.conversation import ConversationStore, StoreChange
from streamchat.exceptions import AttachmentError
from streamchat.exchange import Exchange, ExchangeCoordinator, create_transport
from streamchat.staging import InputStaging
from streamchat.streaming import WordStreamer
from streamchat.types import MessageRole
from streamchat_cli.config import ConfigManager
from streamchat_cli.ui.panels import DIM, error_panel


async def _run_exchange(
    config: StreamchatConfig,
    staging: InputStaging,
    console: Console,
) -> Exchange | None:
    store = ConversationStore()
    transport = create_transport(
        config.transport, url=config.webhook_url, timeout=config.request_timeout
    )
    coordinator = ExchangeCoordinator(
        store,
        transport,
        streamer=WordStreamer(chunk_size=config.chunk_size, delay=config.word_delay),
    )

    with Live(Text(""), console=console, refresh_per_second=20) as live:

        def _on_change(change: StoreChange) -> None:
            message = store.get(change.message_id)
            if message.role is MessageRole.SYSTEM:
                live.update(Text(message.text))

        store.add_listener(_on_change)
        return await coordinator.submit(staging)


def send(
    message: str = typer.Argument(..., help="Text to send."),  # noqa: B008
    attach: list[Path] = typer.Option(  # noqa: B008
        [],
        "--attach",
        "-a",
        help="File to send along with the message. Repeat for several files.",
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
) -> None:
    """Send one message and stream the reply to the terminal."""
    console = Console()
    config = ConfigManager().load(
        overrides={"webhook_url": webhook_url, "transport": "echo" if local else None}
    )

    staging = InputStaging(
        max_attachments=config.max_attachments,
        max_attachment_size=config.max_attachment_size,
    )
    staging.set_text(message)
    try:
        for path in attach:
            staging.attach_path(path)
    except AttachmentError as exc:
        error_panel("Attachment rejected", str(exc), console=console)
        raise typer.Exit(code=1) from exc

    exchange = asyncio.run(_run_exchange(config, staging, console))
    if exchange is None:
        error_panel("Nothing to send", "Provide a message or at least one --attach file.", console=console)
        raise typer.Exit(code=1)

    console.print(f"[{DIM}]{exchange.format_summary()}[/{DIM}]")
    if exchange.failed:
        raise typer.Exit(code=1)
