"""streamchat -- terminal chat client for webhook-backed assistants.

Messages go to a webhook (or a local echo responder), replies are revealed
a couple of words at a time, and each exchange after the first opens a new
section of the conversation.

Quick start::

    from streamchat import ConversationStore, ExchangeCoordinator, InputStaging
    from streamchat.exchange import create_transport

    store = ConversationStore()
    coordinator = ExchangeCoordinator(store, create_transport("echo"))
"""

from streamchat._version import __version__
from streamchat.config import StreamchatConfig, get_config, reset_config
from streamchat.conversation import ConversationStore, FileAttachment, Message, Section
from streamchat.exceptions import (
    AttachmentError,
    ConversationError,
    DuplicateIdError,
    ExchangeError,
    InFlightMessageError,
    InvalidTransitionError,
    MessageFinalizedError,
    MessageNotFoundError,
    StreamchatError,
    TransportError,
)
from streamchat.exchange import Exchange, ExchangeCoordinator
from streamchat.staging import InputStaging, PendingSubmission
from streamchat.streaming import StreamingChunk, WordStreamer
from streamchat.types import ChangeKind, ExchangeState, MessageRole

__all__ = [
    "__version__",
    "AttachmentError",
    "ChangeKind",
    "ConversationError",
    "ConversationStore",
    "DuplicateIdError",
    "Exchange",
    "ExchangeCoordinator",
    "ExchangeError",
    "ExchangeState",
    "FileAttachment",
    "InFlightMessageError",
    "InputStaging",
    "InvalidTransitionError",
    "Message",
    "MessageFinalizedError",
    "MessageNotFoundError",
    "MessageRole",
    "PendingSubmission",
    "Section",
    "StreamchatConfig",
    "StreamchatError",
    "StreamingChunk",
    "TransportError",
    "WordStreamer",
    "get_config",
    "reset_config",
]
