"""Timed word streaming for finished replies.

A reply arrives from the transport in one piece. ``WordStreamer`` reveals it
a few words at a time on a fixed cadence so the chat feels live. Chunks keep
the separating spaces, so joining every chunk gives back the original text
exactly.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 2
DEFAULT_DELAY = 0.040  # seconds per chunk


@dataclass(frozen=True)
class StreamingChunk:
    """A slice of a reply revealed in one tick."""

    id: int
    text: str


def split_words(text: str) -> list[str]:
    """Split on single spaces, keeping empty tokens for runs of spaces."""
    return text.split(" ")


def chunk_words(words: list[str], chunk_size: int) -> list[str]:
    """Group *words* into chunk texts of at most *chunk_size* words.

    Every chunk except the last carries the trailing separator.
    """
    pieces = [
        " ".join(words[start : start + chunk_size])
        for start in range(0, len(words), chunk_size)
    ]
    return [piece + " " for piece in pieces[:-1]] + pieces[-1:]


class WordStreamer:
    """Produces timed chunk sequences, one per reply."""

    def __init__(
        self,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        delay: float = DEFAULT_DELAY,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.chunk_size = chunk_size
        self.delay = delay
        self._ids = itertools.count(1)

    async def stream(self, text: str) -> AsyncIterator[StreamingChunk]:
        """Yield *text* as chunks, sleeping ``delay`` before each one.

        The sequence is finite and cannot be restarted. Closing the iterator
        early (``aclose()`` or leaving an ``async for`` loop) stops any
        further ticks.
        """
        pieces = chunk_words(split_words(text), self.chunk_size)
        logger.debug("Streaming %d chunks (%d chars)", len(pieces), len(text))
        for piece in pieces:
            await asyncio.sleep(self.delay)
            yield StreamingChunk(id=next(self._ids), text=piece)
