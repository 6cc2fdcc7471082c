"""CommandRouter -- slash command text generation without Textual dependencies.

Every method returns a plain string (typically markdown). The TUI app mounts
the returned text into the UI, which keeps commands testable without a
widget tree.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from streamchat.exceptions import AttachmentError

if TYPE_CHECKING:
    from streamchat.config import StreamchatConfig
    from streamchat.exchange import ExchangeCoordinator
    from streamchat.staging import InputStaging

WELCOME_TEXT = """\
  streamchat

  Type a message and press Enter. Replies appear a few words at a time.
  Ctrl+O attaches a file. Escape stops a reply. Ctrl+Q quits.

  Commands:
    /help            Show all commands
    /attach <path>   Attach a file to the next message
    /detach [n]      Remove attachment n, or all of them
    /quit            Exit
"""

_HELP_TEXT = """\
Available commands:
  /help              Show this help message
  /attach <path>     Attach a file to the next message
  /detach            Remove every pending attachment
  /detach <n>        Remove pending attachment number n
  /status            Show session status
  /quit              Exit streamchat

Tips:
  - Shift+Enter inserts a newline
  - Ctrl+O opens the attach dialog
  - Press Escape while a reply is on its way to stop it
"""

# All recognised command names (must include the leading slash).
_COMMANDS: set[str] = {"/help", "/attach", "/detach", "/status", "/quit"}


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.0f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


class CommandRouter:
    """Pure-text command handler -- no widget dependencies."""

    WELCOME_TEXT: str = WELCOME_TEXT

    def __init__(
        self,
        *,
        staging: InputStaging,
        coordinator: ExchangeCoordinator,
        config: StreamchatConfig,
    ) -> None:
        self._staging = staging
        self._coordinator = coordinator
        self._config = config

    # -- metadata -------------------------------------------------------------

    @property
    def commands(self) -> set[str]:
        return _COMMANDS

    @property
    def help_text(self) -> str:
        return _HELP_TEXT

    @staticmethod
    def parse(text: str) -> tuple[str, str]:
        """Split raw input into ``(command, args)``."""
        parts = text.split(maxsplit=1)
        command = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""
        return command, arg

    def is_command(self, text: str) -> bool:
        return self.parse(text)[0] in _COMMANDS if text.startswith("/") else False

    # -- attachments ----------------------------------------------------------

    def attach_text(self, path: str) -> str:
        """Stage the file at *path* and describe the outcome."""
        if not path:
            return "Usage: `/attach <path>`"
        try:
            attachment = self._staging.attach_path(path)
        except AttachmentError as exc:
            return f"**Error:** {exc}"
        kind = "image" if attachment.is_image else "file"
        count = len(self._staging.attachments)
        return (
            f"Attached {kind} `{attachment.filename}` ({format_size(attachment.size)}). "
            f"{count} pending."
        )

    def detach_text(self, arg: str) -> str:
        """Unstage one attachment (1-based) or all of them."""
        if not self._staging.attachments:
            return "No attachments to remove."
        if not arg:
            count = len(self._staging.attachments)
            self._staging.clear_files()
            return f"Removed {count} attachment(s)."
        try:
            removed = self._staging.remove_file(int(arg) - 1)
        except ValueError:
            return "Usage: `/detach [n]`"
        except IndexError:
            return f"No attachment number {arg}."
        return f"Removed `{removed.filename}`."

    def attachments_label(self) -> str:
        """One-line summary for the attachment bar (empty when none)."""
        parts = []
        for index, attachment in enumerate(self._staging.attachments, start=1):
            icon = "▣" if attachment.is_image else "□"
            parts.append(f"{index}. {icon} {attachment.filename} ({format_size(attachment.size)})")
        return ("Attachments: " + ", ".join(parts)) if parts else ""

    # -- status ---------------------------------------------------------------

    def target_label(self) -> str:
        if self._config.transport == "echo":
            return "local echo"
        return self._config.webhook_url

    def status_text(self, message_count: int) -> str:
        coordinator = self._coordinator
        lines = [
            "**Session:**\n",
            f"- Transport: `{self.target_label()}`",
            f"- State: {coordinator.state.value.replace('_', ' ')}",
            f"- Messages: {message_count}",
            f"- Pending attachments: {len(self._staging.attachments)}",
        ]
        if coordinator.current is not None:
            current = coordinator.current
            lines.append(f"- Current exchange: `{current.id}` ({current.format_elapsed()})")
        if coordinator.streaming_id is not None:
            lines.append(f"- Revealed chunks: {len(coordinator.streaming_chunks)}")
        return "\n".join(lines)
