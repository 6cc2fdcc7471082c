"""Exception hierarchy for streamchat.

Conversation and exchange errors signal broken invariants and are treated as
programming errors. ``TransportError``, like any other exception raised by a
transport, becomes the text of the terminal reply.
"""

from __future__ import annotations


class StreamchatError(Exception):
    """Base class for every error raised by streamchat."""


# -- Conversation store -------------------------------------------------------


class ConversationError(StreamchatError):
    """The conversation log was asked to do something that breaks its invariants."""


class DuplicateIdError(ConversationError):
    def __init__(self, message_id: str) -> None:
        super().__init__(f"Message {message_id!r} is already in the conversation")
        self.message_id = message_id


class MessageNotFoundError(ConversationError):
    def __init__(self, message_id: str) -> None:
        super().__init__(f"Message {message_id!r} not found")
        self.message_id = message_id


class MessageFinalizedError(ConversationError):
    def __init__(self, message_id: str) -> None:
        super().__init__(f"Message {message_id!r} is complete and can no longer change")
        self.message_id = message_id


class InFlightMessageError(ConversationError):
    def __init__(self, message_id: str, pending_id: str) -> None:
        super().__init__(
            f"Cannot add incomplete message {message_id!r} while {pending_id!r} is still in flight"
        )
        self.message_id = message_id
        self.pending_id = pending_id


# -- Exchange -----------------------------------------------------------------


class ExchangeError(StreamchatError):
    """Raised for exchange coordinator misuse."""


class InvalidTransitionError(ExchangeError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Illegal exchange transition {current} -> {target}")
        self.current = current
        self.target = target


# -- Transport ----------------------------------------------------------------


class TransportError(StreamchatError):
    """The remote responder could not produce a usable reply."""

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


# -- Staging ------------------------------------------------------------------


class AttachmentError(StreamchatError):
    """A file could not be staged (missing, too large, or over the count limit)."""
