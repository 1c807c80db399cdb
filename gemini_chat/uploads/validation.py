"""Attachment validation for the upload widget and the upload endpoint.

Checks file name, size and type before an attachment reference is accepted.
Only metadata is kept; file contents are not sent to the model.
"""

import logging
from collections.abc import Sequence

from gemini_chat.models.schemas import Attachment

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
MAX_FILES = 5
ACCEPTED_MIME_PREFIXES = ("image/", "text/")
ACCEPTED_EXTENSIONS = (".pdf", ".doc", ".docx", ".json", ".csv")


class AttachmentError(Exception):
    """Raised when an attachment is rejected."""

    pass


class AttachmentTooLargeError(AttachmentError):
    """Raised when an attachment exceeds the size limit."""

    pass


def _is_accepted_type(filename: str, content_type: str) -> bool:
    if content_type.startswith(ACCEPTED_MIME_PREFIXES):
        return True
    return filename.lower().endswith(ACCEPTED_EXTENSIONS)


def validate_attachment(filename: str | None, content_type: str | None, size: int) -> Attachment:
    """Validate a single attachment.

    Args:
        filename: Original file name.
        content_type: MIME type reported by the client.
        size: File size in bytes.

    Returns:
        The accepted Attachment.

    Raises:
        AttachmentError: If the file is unnamed, empty, too large, or of an
            unaccepted type.
    """
    try:
        return _check_attachment(filename, content_type or "", size)
    except AttachmentError as e:
        logger.warning(f"Rejected attachment {filename!r}: {e}")
        raise


def _check_attachment(filename: str | None, content_type: str, size: int) -> Attachment:
    if not filename:
        raise AttachmentError("Filename is required")

    if size <= 0:
        raise AttachmentError(f"Empty file provided: {filename}")

    if size > MAX_FILE_SIZE:
        size_mb = size / (1024 * 1024)
        raise AttachmentTooLargeError(
            f"File size ({size_mb:.1f}MB) exceeds maximum allowed ({MAX_FILE_SIZE // (1024 * 1024)}MB)"
        )

    if not _is_accepted_type(filename, content_type):
        raise AttachmentError(f"Unsupported file type: {filename}")

    return Attachment(name=filename, size=size, content_type=content_type)


def validate_attachments(attachments: Sequence[Attachment]) -> list[Attachment]:
    """Validate a batch of attachments submitted together.

    Raises:
        AttachmentError: If there are too many files or any file is rejected.
    """
    if len(attachments) > MAX_FILES:
        logger.warning(f"Rejected batch of {len(attachments)} attachments")
        raise AttachmentError(f"At most {MAX_FILES} files can be attached")
    return [validate_attachment(a.name, a.content_type, a.size) for a in attachments]


def format_file_size(size: int) -> str:
    """Format a byte count for display (e.g. ``1.5 MB``)."""
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    for unit in units:
        if value < 1024 or unit == units[-1]:
            if unit == "Bytes":
                return f"{int(value)} {unit}"
            return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        value /= 1024
    return f"{size} Bytes"
