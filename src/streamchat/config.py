from __future__ import annotations

import threading
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

_lock = threading.Lock()
_instance: StreamchatConfig | None = None

DEFAULT_WEBHOOK_URL = "http://localhost:5678/webhook/chat"


class StreamchatConfig(BaseSettings):
    model_config = {"env_prefix": "STREAMCHAT_"}

    webhook_url: str = DEFAULT_WEBHOOK_URL
    transport: Literal["webhook", "echo"] = "webhook"
    chunk_size: int = Field(default=2, ge=1)
    word_delay_ms: int = Field(default=40, ge=0)
    request_timeout: float = Field(default=120.0, gt=0)
    max_attachments: int = Field(default=5, ge=0)
    max_attachment_size: int = Field(default=10 * 1024 * 1024, gt=0)

    @property
    def word_delay(self) -> float:
        """Streaming cadence in seconds."""
        return self.word_delay_ms / 1000


def get_config() -> StreamchatConfig:
    global _instance
    if _instance is None:
        with _lock:
            if _instance is None:
                _instance = StreamchatConfig()
    return _instance


def reset_config() -> None:
    global _instance
    with _lock:
        _instance = None
