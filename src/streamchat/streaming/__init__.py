"""Incremental reveal of finished replies."""

from streamchat.streaming.streamer import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DELAY,
    StreamingChunk,
    WordStreamer,
    chunk_words,
    split_words,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_DELAY",
    "StreamingChunk",
    "WordStreamer",
    "chunk_words",
    "split_words",
]
