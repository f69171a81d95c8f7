"""
Input validation utilities for the Storefront API.

Provides reusable validators for uploaded files.
"""
import re

from domain.constants import ALLOWED_IMAGE_MIME_PREFIX
from domain.errors import ValidationError

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_filename(filename: str | None) -> str:
    """Replace anything outside [a-zA-Z0-9.-] with '_'; empty names become 'upload'."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", (filename or "").strip())
    return cleaned or "upload"


def validate_image_upload(content: bytes, content_type: str | None, max_bytes: int) -> bytes:
    """
    Validate an uploaded image payload.

    Args:
        content: Raw file bytes
        content_type: MIME type reported by the client
        max_bytes: Upper size limit

    Returns:
        The content (unchanged)

    Raises:
        ValidationError(400) if the file is missing, empty, too big or not an image
    """
    if not content_type or not content_type.startswith(ALLOWED_IMAGE_MIME_PREFIX):
        raise ValidationError("Only image files are allowed", field="file")

    if not content:
        raise ValidationError("No file uploaded", field="file")

    if len(content) > max_bytes:
        raise ValidationError(
            f"File must be under {max_bytes // (1024 * 1024)} MB",
            field="file",
            details={"size": len(content), "max_bytes": max_bytes},
        )

    return content

