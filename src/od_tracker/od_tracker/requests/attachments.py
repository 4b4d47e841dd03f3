from __future__ import annotations

import base64
from typing import Optional

from ..core.constants import ALLOWED_ATTACHMENT_TYPES, DEFAULT_MAX_ATTACHMENT_MB
from ..core.exceptions import ValidationError
from .model import Attachment


def validate_attachment(
    *,
    size_bytes: int,
    mime_type: str,
    max_size_mb: int = DEFAULT_MAX_ATTACHMENT_MB,
) -> None:
    if size_bytes <= 0:
        raise ValidationError("No file selected")
    if size_bytes > max_size_mb * 1024 * 1024:
        raise ValidationError(f"File size must be less than {max_size_mb}MB")
    if (mime_type or "").lower() not in ALLOWED_ATTACHMENT_TYPES:
        raise ValidationError("Only JPEG, PNG, and PDF files are allowed")


def encode_attachment(
    content: bytes,
    *,
    mime_type: str,
    filename: str,
    max_size_mb: int = DEFAULT_MAX_ATTACHMENT_MB,
) -> Attachment:
    """Validate an uploaded file and encode it for inline storage."""

    validate_attachment(size_bytes=len(content or b""), mime_type=mime_type, max_size_mb=max_size_mb)
    return Attachment(
        content_b64=base64.b64encode(content).decode("ascii"),
        mime_type=mime_type.lower(),
        filename=(filename or "").strip() or "document",
    )


def decode_attachment(attachment: Optional[Attachment]) -> Optional[bytes]:
    if attachment is None:
        return None
    return base64.b64decode(attachment.content_b64)
