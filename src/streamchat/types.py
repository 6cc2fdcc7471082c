from __future__ import annotations

from enum import StrEnum


class MessageRole(StrEnum):
    USER = "user"
    SYSTEM = "system"


class ExchangeState(StrEnum):
    IDLE = "idle"
    SENDING = "sending"
    AWAITING_REPLY = "awaiting_reply"
    STREAMING = "streaming"
    FAILED = "failed"


class ChangeKind(StrEnum):
    APPENDED = "appended"
    UPDATED = "updated"
    SECTION_OPENED = "section_opened"
