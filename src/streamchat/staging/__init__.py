"""Pending user input before it is handed to an exchange."""

from streamchat.staging.input import (
    MAX_ATTACHMENT_SIZE,
    MAX_ATTACHMENTS,
    InputStaging,
    PendingSubmission,
    SelectionSnapshot,
)

__all__ = [
    "MAX_ATTACHMENTS",
    "MAX_ATTACHMENT_SIZE",
    "InputStaging",
    "PendingSubmission",
    "SelectionSnapshot",
]
