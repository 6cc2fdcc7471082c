"""Exchange record: one submit → transport → finalize cycle.

Besides the ids it correlates, an exchange keeps monotonic timestamps for
its three phases: accepted (user sent), replied (transport returned) and
finished (terminal write done). The TUI uses them for the reply summary.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from streamchat.staging.input import PendingSubmission


class TransportReply(BaseModel):
    """Successful transport result."""

    model_config = ConfigDict(frozen=True)

    text: str
    status_code: int = 200


@dataclass
class Exchange:
    """A single accepted submission and its outcome."""

    submission: PendingSubmission
    user_message_id: str
    reply_message_id: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    reply_text: str | None = None
    error: str | None = None
    cancelled: bool = False
    chunk_count: int = 0
    finished: asyncio.Event = field(default_factory=asyncio.Event)
    accepted_at: float = field(default_factory=time.monotonic)
    replied_at: float | None = None
    finished_at: float | None = None

    async def wait(self) -> None:
        """Block until the exchange reached a terminal state."""
        await self.finished.wait()

    @property
    def failed(self) -> bool:
        return self.error is not None

    # ── lifecycle ────────────────────────────────

    def mark_replied(self) -> None:
        if self.replied_at is None:
            self.replied_at = time.monotonic()

    def mark_finished(self) -> None:
        if self.finished_at is None:
            self.finished_at = time.monotonic()
        self.finished.set()

    # ── durations ────────────────────────────────

    @property
    def elapsed(self) -> float:
        """Seconds since acceptance (or until finish once finished)."""
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.accepted_at

    @property
    def wait_time(self) -> float:
        """Seconds spent waiting on the transport."""
        if self.replied_at is None:
            return 0.0
        return self.replied_at - self.accepted_at

    @property
    def streaming_time(self) -> float:
        if self.replied_at is None or self.finished_at is None:
            return 0.0
        return self.finished_at - self.replied_at

    def format_elapsed(self) -> str:
        return f"{self.elapsed:.1f}s"

    def format_summary(self) -> str:
        """One-line summary, e.g. ``'0.8s waiting · 1.3s total · 12 words'``."""
        parts = []
        if self.wait_time > 0:
            parts.append(f"{self.wait_time:.1f}s waiting")
        parts.append(f"{self.elapsed:.1f}s total")
        if self.reply_text is not None:
            words = len(self.reply_text.split())
            parts.append(f"{words:,} words")
            if self.streaming_time > 0 and words > 0:
                parts.append(f"{words / self.streaming_time:.0f} words/s")
        elif self.error is not None:
            parts.append("failed")
        return " · ".join(parts)
