"""Input staging: pending text, pending attachments and cursor selection.

Staging is written by user-interaction handlers. The exchange coordinator
takes ownership of its content at the moment a submission is accepted and
locks it until the exchange is over.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from streamchat.conversation.models import FileAttachment
from streamchat.exceptions import AttachmentError

logger = logging.getLogger(__name__)

# Maximum file size (10 MB) and maximum number of attachments.
MAX_ATTACHMENT_SIZE = 10 * 1024 * 1024
MAX_ATTACHMENTS = 5


class PendingSubmission(BaseModel):
    """Immutable snapshot of what the user is sending."""

    model_config = ConfigDict(frozen=True)

    text: str
    attachments: tuple[FileAttachment, ...] = ()


class SelectionSnapshot(BaseModel):
    """Cursor selection as character offsets into the staged text."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class InputStaging:
    """Holds what the user has typed and attached but not yet sent."""

    def __init__(
        self,
        *,
        max_attachments: int = MAX_ATTACHMENTS,
        max_attachment_size: int = MAX_ATTACHMENT_SIZE,
    ) -> None:
        self._text = ""
        self._attachments: list[FileAttachment] = []
        self._selection: SelectionSnapshot | None = None
        self._locked = False
        self.max_attachments = max_attachments
        self.max_attachment_size = max_attachment_size

    # -- state ----------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def attachments(self) -> tuple[FileAttachment, ...]:
        return tuple(self._attachments)

    @property
    def locked(self) -> bool:
        """True while an exchange owns the last submission."""
        return self._locked

    @property
    def has_content(self) -> bool:
        return bool(self._text.strip()) or bool(self._attachments)

    def can_submit(self) -> bool:
        return self.has_content and not self._locked

    # -- text -----------------------------------------------------------------

    def set_text(self, text: str) -> None:
        self._text = text

    # -- attachments ----------------------------------------------------------

    def add_files(self, files: Iterable[FileAttachment]) -> None:
        """Stage *files* after the ones already staged.

        Either every file is staged or, when one breaks a limit, none is.
        """
        incoming = list(files)
        if len(self._attachments) + len(incoming) > self.max_attachments:
            raise AttachmentError(
                f"Maximum {self.max_attachments} attachments reached"
            )
        for attachment in incoming:
            if attachment.size > self.max_attachment_size:
                limit_mb = self.max_attachment_size // (1024 * 1024)
                raise AttachmentError(
                    f"{attachment.filename} is too large ({attachment.size:,} bytes). Max {limit_mb}MB."
                )
        self._attachments.extend(incoming)
        logger.debug("Staged %d file(s), %d pending", len(incoming), len(self._attachments))

    def attach_path(self, path_str: str | Path) -> FileAttachment:
        """Read a file from disk and stage it."""
        path = Path(path_str).expanduser().resolve()
        if not path.is_file():
            raise AttachmentError(f"File not found: {path}")
        size = path.stat().st_size
        if size > self.max_attachment_size:
            limit_mb = self.max_attachment_size // (1024 * 1024)
            raise AttachmentError(f"{path.name} is too large ({size:,} bytes). Max {limit_mb}MB.")
        attachment = FileAttachment.from_path(path)
        self.add_files([attachment])
        return attachment

    def remove_file(self, index: int) -> FileAttachment:
        """Unstage the attachment at *index*, keeping the others in order."""
        if not 0 <= index < len(self._attachments):
            raise IndexError(f"No staged attachment at index {index}")
        return self._attachments.pop(index)

    def clear_files(self) -> None:
        self._attachments.clear()

    # -- selection ------------------------------------------------------------

    def save_selection(self, start: int, end: int) -> None:
        """Remember the cursor selection before focus moves elsewhere."""
        self._selection = SelectionSnapshot(start=min(start, end), end=max(start, end))

    def restore_selection(self) -> SelectionSnapshot | None:
        """Return the saved selection, clamped to the current text."""
        if self._selection is None:
            return None
        limit = len(self._text)
        return SelectionSnapshot(
            start=min(self._selection.start, limit),
            end=min(self._selection.end, limit),
        )

    # -- hand-off to the coordinator ------------------------------------------

    def take(self) -> PendingSubmission:
        """Snapshot the staged content and clear it in one step."""
        submission = PendingSubmission(
            text=self._text.strip(),
            attachments=tuple(self._attachments),
        )
        self._text = ""
        self._attachments = []
        self._selection = None
        return submission

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False
