"""Modal file picker opened with Ctrl+O."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label


class AttachScreen(ModalScreen[str | None]):
    """Ask for a file path. Dismisses with the path, or ``None`` on Escape."""

    DEFAULT_CSS = """
    AttachScreen {
        align: center top;
        padding-top: 5;
    }

    #attach-container {
        width: 70;
        height: auto;
        background: #2A2A3E;
        border: round #B85CE7;
        padding: 1;
    }

    #attach-title {
        color: #B85CE7;
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [("escape", "dismiss_modal", "Close")]

    def compose(self) -> ComposeResult:
        with Vertical(id="attach-container"):
            yield Label("Attach a file", id="attach-title")
            yield Input(placeholder="Path to file...", id="attach-input")

    def on_mount(self) -> None:
        self.query_one("#attach-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        self.dismiss(value or None)

    def action_dismiss_modal(self) -> None:
        self.dismiss(None)
