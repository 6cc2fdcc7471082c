"""Animated indicator for a pending reply.

Shows a cycling spinner while the request is in flight, then an elapsed
time counter once the reply is being revealed.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from textual.widgets import Static

from streamchat.types import ExchangeState

SPINNER_FRAMES = ["·  ", "·· ", "···", " ··", "  ·", "   "]

STATE_LABELS = {
    ExchangeState.SENDING: "Sending",
    ExchangeState.AWAITING_REPLY: "Waiting for reply",
    ExchangeState.STREAMING: "Replying",
}


@runtime_checkable
class _HasFormatElapsed(Protocol):
    def format_elapsed(self) -> str: ...


class ThinkingIndicator(Static):
    """Spinner bound to one exchange.

    The spinner advances every 100 ms. :meth:`set_state` changes the label,
    and switching to ``STREAMING`` replaces the spinner with the elapsed
    time of *source*. :meth:`stop` halts every timer.
    """

    def __init__(self, source: _HasFormatElapsed | None = None, **kwargs: Any) -> None:
        super().__init__(
            f"{STATE_LABELS[ExchangeState.SENDING]}{SPINNER_FRAMES[0]}",
            classes="streaming-indicator",
            **kwargs,
        )
        self._source = source
        self._label = STATE_LABELS[ExchangeState.SENDING]
        self._spinner_index = 0
        self._spinner_timer: Any | None = None
        self._elapsed_timer: Any | None = None
        self._is_running = True

    def on_mount(self) -> None:
        if self._is_running:
            self._spinner_timer = self.set_interval(0.1, self._tick)

    def _tick(self) -> None:
        if not self._is_running:
            return
        self._spinner_index = (self._spinner_index + 1) % len(SPINNER_FRAMES)
        self.update(f"{self._label}{SPINNER_FRAMES[self._spinner_index]}")

    @property
    def source(self) -> _HasFormatElapsed | None:
        return self._source

    @property
    def label(self) -> str:
        return self._label

    def set_state(self, state: ExchangeState) -> None:
        """Follow the exchange into *state*."""
        if state not in STATE_LABELS:
            return
        self._label = STATE_LABELS[state]
        if state is ExchangeState.STREAMING and self._source is not None:
            self._is_running = False
            if self._spinner_timer is not None:
                self._spinner_timer.stop()
            if self._elapsed_timer is None:
                self._elapsed_timer = self.set_interval(0.5, self._update_elapsed)
            self._update_elapsed()
        else:
            self.update(f"{self._label}{SPINNER_FRAMES[self._spinner_index]}")

    def _update_elapsed(self) -> None:
        if self._source is not None:
            self.update(f"{self._label} ··· {self._source.format_elapsed()}")

    def stop(self) -> None:
        self._is_running = False
        if self._spinner_timer is not None:
            self._spinner_timer.stop()
        if self._elapsed_timer is not None:
            self._elapsed_timer.stop()
