"""Attachment validation.

Responsibilities:
    - File count, size and type limits for attachments
    - Display formatting for file sizes

Attachments are referenced in user messages but never sent to the model.
"""

from gemini_chat.uploads.validation import (
    MAX_FILE_SIZE,
    MAX_FILES,
    AttachmentError,
    AttachmentTooLargeError,
    format_file_size,
    validate_attachment,
    validate_attachments,
)

__all__ = [
    "MAX_FILES",
    "MAX_FILE_SIZE",
    "AttachmentError",
    "AttachmentTooLargeError",
    "format_file_size",
    "validate_attachment",
    "validate_attachments",
]
