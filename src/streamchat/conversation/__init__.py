"""Conversation log: messages, sections and the in-memory store."""

from streamchat.conversation.models import (
    EXTENSION_MIME_MAP,
    FileAttachment,
    Message,
    Section,
    guess_media_type,
)
from streamchat.conversation.sections import derive_sections
from streamchat.conversation.store import ConversationStore, StoreChange, StoreListener

__all__ = [
    "EXTENSION_MIME_MAP",
    "ConversationStore",
    "FileAttachment",
    "Message",
    "Section",
    "StoreChange",
    "StoreListener",
    "derive_sections",
    "guess_media_type",
]
