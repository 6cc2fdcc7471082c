"""Message, attachment and section models for the conversation log."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from streamchat.types import MessageRole

# Extension → MIME type mapping for files picked from disk.
EXTENSION_MIME_MAP: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".json": "application/json",
    ".yaml": "application/x-yaml",
    ".yml": "application/x-yaml",
    ".xml": "text/xml",
    ".html": "text/html",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".zip": "application/zip",
}

DEFAULT_MEDIA_TYPE = "application/octet-stream"


def guess_media_type(filename: str) -> str:
    """Return the MIME type for *filename* based on its extension."""
    return EXTENSION_MIME_MAP.get(Path(filename).suffix.lower(), DEFAULT_MEDIA_TYPE)


def new_message_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class FileAttachment(BaseModel):
    """A file attached to a user message."""

    model_config = ConfigDict(frozen=True)

    filename: str
    media_type: str  # MIME type
    data: bytes  # raw file content
    size: int

    @property
    def is_image(self) -> bool:
        return self.media_type.startswith("image/")

    @classmethod
    def from_bytes(cls, filename: str, data: bytes, media_type: str | None = None) -> FileAttachment:
        return cls(
            filename=filename,
            media_type=media_type or guess_media_type(filename),
            data=data,
            size=len(data),
        )

    @classmethod
    def from_path(cls, path: Path) -> FileAttachment:
        """Read *path* from disk into an attachment."""
        return cls.from_bytes(path.name, path.read_bytes())


class Message(BaseModel):
    """One entry of the conversation log.

    Instances are frozen. The store replaces a message with an updated copy,
    so a snapshot handed to the render layer never changes under it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    role: MessageRole
    text: str = ""
    is_complete: bool = True
    starts_new_section: bool = False
    attachments: tuple[FileAttachment, ...] = ()
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def user(
        cls,
        text: str,
        *,
        attachments: tuple[FileAttachment, ...] = (),
        starts_new_section: bool = False,
    ) -> Message:
        return cls(
            id=new_message_id("user"),
            role=MessageRole.USER,
            text=text,
            attachments=attachments,
            starts_new_section=starts_new_section,
        )

    @classmethod
    def placeholder(cls) -> Message:
        """An empty, incomplete system reply waiting to be filled."""
        return cls(
            id=new_message_id("reply"),
            role=MessageRole.SYSTEM,
            is_complete=False,
        )


class Section(BaseModel):
    """A contiguous run of messages grouped for display."""

    model_config = ConfigDict(frozen=True)

    id: str
    index: int
    messages: tuple[Message, ...]
    is_new_section: bool = False
    is_active: bool = False

    @property
    def is_anchored(self) -> bool:
        """Sections after the first take part in fixed-height scroll anchoring."""
        return self.index > 0
