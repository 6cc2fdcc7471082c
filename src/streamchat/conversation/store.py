"""In-memory conversation log with derived sections.

The store owns the ordered message list for the lifetime of the process.
Sections are re-derived after every mutation and listeners are told what
changed, so the render layer never has to diff the log itself.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from streamchat.conversation.models import Message, Section
from streamchat.conversation.sections import derive_sections
from streamchat.exceptions import (
    DuplicateIdError,
    InFlightMessageError,
    MessageFinalizedError,
    MessageNotFoundError,
)
from streamchat.types import ChangeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreChange:
    """Notification sent to store listeners after a mutation."""

    kind: ChangeKind
    message_id: str
    sections: tuple[Section, ...]


StoreListener = Callable[[StoreChange], None]


class ConversationStore:
    """Ordered message log for a single session."""

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._index: dict[str, int] = {}
        self._sections: tuple[Section, ...] = ()
        self._listeners: list[StoreListener] = []

    # ── Reads ──────────────────────────────────────────────────────

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def pending_id(self) -> str | None:
        """Id of the message that is still being filled, if any."""
        for message in reversed(self._messages):
            if not message.is_complete:
                return message.id
        return None

    def get(self, message_id: str) -> Message:
        try:
            return self._messages[self._index[message_id]]
        except KeyError:
            raise MessageNotFoundError(message_id) from None

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._index

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def sections(self) -> tuple[Section, ...]:
        """Sections derived from the current log."""
        return self._sections

    @property
    def active_section(self) -> Section | None:
        return self._sections[-1] if self._sections else None

    # ── Writes ─────────────────────────────────────────────────────

    def append(self, message: Message) -> Message:
        """Add *message* at the tail of the log."""
        if message.id in self._index:
            raise DuplicateIdError(message.id)
        if not message.is_complete:
            pending = self.pending_id
            if pending is not None:
                raise InFlightMessageError(message.id, pending)

        previous_count = len(self._sections)
        self._index[message.id] = len(self._messages)
        self._messages.append(message)
        self._sections = derive_sections(self._messages)
        logger.debug("Appended %s message %s", message.role, message.id)

        self._notify(ChangeKind.APPENDED, message.id)
        if len(self._sections) > previous_count:
            self._notify(ChangeKind.SECTION_OPENED, message.id)
        return message

    def update(
        self,
        message_id: str,
        *,
        text: str | None = None,
        is_complete: bool | None = None,
    ) -> Message:
        """Apply a partial update to one message and return the new version."""
        current = self.get(message_id)
        if current.is_complete:
            raise MessageFinalizedError(message_id)

        changes: dict[str, object] = {}
        if text is not None:
            changes["text"] = text
        if is_complete is not None:
            changes["is_complete"] = is_complete
        if not changes:
            return current

        updated = current.model_copy(update=changes)
        self._messages[self._index[message_id]] = updated
        self._sections = derive_sections(self._messages)
        self._notify(ChangeKind.UPDATED, message_id)
        return updated

    def append_text(self, message_id: str, text: str) -> Message:
        """Extend the visible text of an incomplete message."""
        current = self.get(message_id)
        return self.update(message_id, text=current.text + text)

    # ── Listeners ──────────────────────────────────────────────────

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, kind: ChangeKind, message_id: str) -> None:
        change = StoreChange(kind=kind, message_id=message_id, sections=self._sections)
        for listener in list(self._listeners):
            listener(change)
