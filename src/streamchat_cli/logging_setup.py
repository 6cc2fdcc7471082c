"""Log handler wiring for ``--verbose``."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_FORMAT = "%(name)s: %(message)s"


def configure_logging(*, verbose: bool, interactive: bool) -> None:
    """Attach one handler to the ``streamchat`` loggers.

    The TUI owns the terminal, so interactive sessions route records to the
    Textual devtools console instead of stderr.
    """
    if not verbose:
        return
    handler: logging.Handler
    if interactive:
        from textual.logging import TextualHandler

        handler = TextualHandler()
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
    handler.setFormatter(logging.Formatter(_FORMAT))
    for name in ("streamchat", "streamchat_cli"):
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        if not any(type(h) is type(handler) for h in logger.handlers):
            logger.addHandler(handler)
