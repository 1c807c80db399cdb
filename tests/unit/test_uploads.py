"""Unit tests for attachment validation."""

import logging

import pytest
import pytest_check as check

from gemini_chat.models.schemas import Attachment
from gemini_chat.uploads.validation import (
    MAX_FILE_SIZE,
    MAX_FILES,
    AttachmentError,
    AttachmentTooLargeError,
    format_file_size,
    validate_attachment,
    validate_attachments,
)


class TestValidateAttachment:
    """Tests for single-file validation."""

    @pytest.mark.parametrize(
        "filename,content_type",
        [
            ("photo.png", "image/png"),
            ("notes.txt", "text/plain"),
            ("report.pdf", "application/pdf"),
            ("letter.docx", "application/octet-stream"),
            ("data.CSV", ""),
            ("payload.json", "application/json"),
        ],
    )
    def test_accepted_types(self, filename: str, content_type: str) -> None:
        """Images, text and the listed document extensions are accepted."""
        attachment = validate_attachment(filename, content_type, 1024)

        check.equal(attachment.name, filename)
        check.equal(attachment.size, 1024)

    def test_rejects_unsupported_type(self) -> None:
        """Executables and other types are rejected."""
        with pytest.raises(AttachmentError, match="Unsupported file type"):
            validate_attachment("setup.exe", "application/x-msdownload", 1024)

    def test_rejects_missing_filename(self) -> None:
        """An upload without a name is rejected."""
        with pytest.raises(AttachmentError, match="Filename is required"):
            validate_attachment(None, "text/plain", 10)

    def test_rejects_empty_file(self) -> None:
        """Zero-byte files are rejected."""
        with pytest.raises(AttachmentError, match="Empty file"):
            validate_attachment("empty.txt", "text/plain", 0)

    def test_rejects_oversized_file(self) -> None:
        """Files over 10MB raise AttachmentTooLargeError."""
        with pytest.raises(AttachmentTooLargeError, match="exceeds maximum"):
            validate_attachment("big.pdf", "application/pdf", MAX_FILE_SIZE + 1)

    def test_rejection_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Rejected files leave a warning naming the file."""
        with caplog.at_level(logging.WARNING, logger="gemini_chat.uploads.validation"):
            with pytest.raises(AttachmentError):
                validate_attachment("setup.exe", "application/x-msdownload", 1024)

        check.is_in("setup.exe", caplog.text)
        check.is_in("Unsupported file type", caplog.text)

    def test_accepts_file_at_size_limit(self) -> None:
        """Exactly 10MB is allowed."""
        attachment = validate_attachment("big.pdf", "application/pdf", MAX_FILE_SIZE)

        check.equal(attachment.size, MAX_FILE_SIZE)


class TestValidateAttachments:
    """Tests for batch validation."""

    def test_rejects_too_many_files(self) -> None:
        """More than five files in one message is rejected."""
        files = [
            Attachment(name=f"f{i}.txt", size=1, content_type="text/plain")
            for i in range(MAX_FILES + 1)
        ]

        with pytest.raises(AttachmentError, match="At most"):
            validate_attachments(files)

    def test_accepts_batch_within_limit(self) -> None:
        """Up to five valid files pass through unchanged."""
        files = [
            Attachment(name=f"f{i}.txt", size=1, content_type="text/plain")
            for i in range(MAX_FILES)
        ]

        check.equal(validate_attachments(files), files)


class TestFormatFileSize:
    """Tests for human-readable sizes."""

    @pytest.mark.parametrize(
        "size,expected",
        [(0, "0 Bytes"), (512, "512 Bytes"), (1024, "1 KB"), (1536, "1.5 KB"), (10485760, "10 MB")],
    )
    def test_formats(self, size: int, expected: str) -> None:
        check.equal(format_file_size(size), expected)
