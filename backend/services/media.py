"""Upload validation and encoding for the AI request builder."""
from __future__ import annotations

import base64
from typing import Iterable, Optional, Tuple

from config import settings

FIXIT_MEDIA_PREFIXES = ("image/", "video/")
IMAGE_ONLY_PREFIXES = ("image/",)


class MediaValidationError(ValueError):
    """Upload rejected before any AI call is made."""


def _matches(mime_type: str, prefixes: Iterable[str]) -> bool:
    return any(mime_type.startswith(prefix) for prefix in prefixes)


def encode_upload(
    data: bytes,
    mime_type: Optional[str],
    allowed_prefixes: Tuple[str, ...] = FIXIT_MEDIA_PREFIXES,
    max_bytes: Optional[int] = None,
) -> Tuple[str, str]:
    """Validate raw upload bytes and return (base64 data, mime type)."""
    mime_type = (mime_type or "").split(";")[0].strip().lower()
    if not mime_type or not _matches(mime_type, allowed_prefixes):
        kinds = " or ".join(prefix.rstrip("/") for prefix in allowed_prefixes)
        raise MediaValidationError(f"Please select a valid {kinds} file.")

    if not data:
        raise MediaValidationError("The uploaded file is empty.")

    limit = max_bytes if max_bytes is not None else settings.max_upload_bytes
    if len(data) > limit:
        raise MediaValidationError(
            f"The uploaded file is too large. The limit is {limit // (1024 * 1024)}MB."
        )

    return base64.b64encode(data).decode("ascii"), mime_type


async def read_upload(upload, max_bytes: Optional[int] = None) -> bytes:
    """Read at most one byte past the limit so oversized files are never buffered whole."""
    limit = max_bytes if max_bytes is not None else settings.max_upload_bytes
    return await upload.read(limit + 1)
