"""Short Upload Policy — pure validation and naming rules for uploaded video shorts.

Invariants:
    - Only MIME types in ALLOWED_VIDEO_MIME_TYPES are accepted
    - A file strictly larger than MAX_SHORT_SIZE_BYTES is rejected
    - At most MAX_FILES_PER_UPLOAD file parts per request
    - Stored name: short-{user_id|unknown}-{epoch_ms}-{8 base36 chars}{lower ext}

Design Decisions:
    - check_* functions return an UploadError or None, never raise: the caller
      decides when to raise so validation stays testable as plain values
    - Token drawn from `secrets`: collision-resistant, not a security boundary
"""

import os
import secrets
import string
import time
from collections.abc import Mapping

from app.core.errors import (
    FileTooLargeError,
    TooManyFilesError,
    UnexpectedFileFieldError,
    UnsupportedMediaTypeError,
    UploadError,
)

SHORT_FIELD_NAME = "videoFile"
SHORTS_SUBDIRECTORY = "shorts"
SHORTS_URL_PREFIX = "/uploads/shorts/"

MAX_SHORT_SIZE_BYTES = 100 * 1024 * 1024
MAX_FILES_PER_UPLOAD = 1

ALLOWED_VIDEO_MIME_TYPES = frozenset({
    "video/mp4",
    "video/webm",
    "video/quicktime",
    "video/x-msvideo",
    "video/x-matroska",
})

TOKEN_ALPHABET = string.digits + string.ascii_lowercase
TOKEN_LENGTH = 8


# ─── Naming ──────────────────────────────────────────────────────

def random_token(length: int = TOKEN_LENGTH) -> str:
    """Random base-36 token."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def file_extension(original_name: str | None) -> str:
    """Lowercased extension including the dot, or '' when there is none."""
    if not original_name:
        return ""
    return os.path.splitext(os.path.basename(original_name))[1].lower()


def build_short_filename(
    user_id: object | None,
    original_name: str | None,
    now_ms: int | None = None,
    token: str | None = None,
) -> str:
    owner = str(user_id) if user_id else "unknown"
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = token if token is not None else random_token()
    return f"short-{owner}-{timestamp}-{suffix}{file_extension(original_name)}"


def short_public_url(filename: str) -> str:
    return f"{SHORTS_URL_PREFIX}{filename}"


def filename_from_public_url(url: str) -> str | None:
    """Inverse of short_public_url; None for URLs outside the shorts directory."""
    if not url or not url.startswith(SHORTS_URL_PREFIX):
        return None
    return url[len(SHORTS_URL_PREFIX):] or None


# ─── Validation ──────────────────────────────────────────────────

def normalize_mime_type(mime_type: str | None) -> str:
    """Strip parameters ("; codecs=...") and lowercase."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def check_mime_type(mime_type: str | None) -> UploadError | None:
    if normalize_mime_type(mime_type) not in ALLOWED_VIDEO_MIME_TYPES:
        return UnsupportedMediaTypeError(mime_type or "")
    return None


def check_file_size(
    size_bytes: int | None, max_bytes: int = MAX_SHORT_SIZE_BYTES,
) -> UploadError | None:
    """Unknown size (None) passes; the copy loop enforces the limit later."""
    if size_bytes is not None and size_bytes > max_bytes:
        return FileTooLargeError(max_bytes)
    return None


def check_file_count(count: int) -> UploadError | None:
    if count > MAX_FILES_PER_UPLOAD:
        return TooManyFilesError(count)
    return None


def check_field_name(field_name: str) -> UploadError | None:
    if field_name != SHORT_FIELD_NAME:
        return UnexpectedFileFieldError(field_name, SHORT_FIELD_NAME)
    return None


def validate_short_upload(
    field_name: str,
    mime_type: str | None,
    size_bytes: int | None,
    file_count: int = 1,
    max_bytes: int = MAX_SHORT_SIZE_BYTES,
) -> UploadError | None:
    """Chain all pre-write checks. Returns first error or None."""
    return (
        check_file_count(file_count)
        or check_field_name(field_name)
        or check_mime_type(mime_type)
        or check_file_size(size_bytes, max_bytes)
    )


# ─── Orphans ─────────────────────────────────────────────────────

def find_orphaned_files(
    modified_at: Mapping[str, float],
    referenced: set[str],
    now: float,
    min_age_seconds: float,
) -> list[str]:
    """Names not referenced by any video and untouched for min_age_seconds.

    Args:
        modified_at: filename -> mtime (epoch seconds)
        referenced: filenames still pointed at by a stored video
    """
    return sorted(
        name for name, mtime in modified_at.items()
        if name not in referenced and now - mtime >= min_age_seconds
    )
