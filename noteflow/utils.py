"""Utilities Module

Helper functions for upload validation and file naming.
"""
import os
import re
from typing import Optional

from .config import ALLOWED_MIME_TYPES, MAX_FILE_SIZE_MB
from .exceptions import FileSizeLimitExceededError, UnsupportedInputError, ValidationError

PROCESSING_ISSUE_MARKERS = ("error", "unable to process")


def validate_upload(mime_type: Optional[str], size_bytes: int, max_mb: float = MAX_FILE_SIZE_MB) -> float:
    """
    Validate an uploaded file's type and size.

    Args:
        mime_type: MIME type reported for the upload
        size_bytes: Upload size in bytes
        max_mb: Maximum size in MB

    Returns:
        File size in MB

    Raises:
        UnsupportedInputError: If the MIME type is not accepted
        FileSizeLimitExceededError: If the upload exceeds max_mb
        ValidationError: If the upload is empty
    """
    if not mime_type or mime_type not in ALLOWED_MIME_TYPES:
        raise UnsupportedInputError(mime_type or "unknown")

    if size_bytes <= 0:
        raise ValidationError("Uploaded file is empty")

    size_mb = size_bytes / (1024 * 1024)
    if size_mb > max_mb:
        raise FileSizeLimitExceededError(size_mb, max_mb)
    return size_mb


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "4.3 MB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def clean_filename(title: str) -> str:
    """
    Turn a document title into a safe file name stem.

    Args:
        title: Document title or original filename

    Returns:
        Name limited to word characters, dashes and underscores
    """
    name = os.path.basename(title or "")
    if name.lower().endswith(".pdf"):
        name = name[:-4]

    name = re.sub(r'[^\w\s-]', '', name, flags=re.ASCII)
    name = re.sub(r'\s+', '_', name.strip())

    if len(name) > 50:
        name = name[:50]

    return name or 'document'


def detect_processing_issue(summary: str) -> bool:
    """True if the summary text suggests the AI could not process the input."""
    lowered = (summary or "").lower()
    return any(marker in lowered for marker in PROCESSING_ISSUE_MARKERS)
