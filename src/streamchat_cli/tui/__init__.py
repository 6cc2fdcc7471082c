"""Textual TUI for streamchat."""

from streamchat_cli.tui.app import StreamchatApp

__all__ = ["StreamchatApp"]
