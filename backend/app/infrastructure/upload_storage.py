"""Short Upload Storage — disk placement for validated video shorts.

Invariants:
    - The destination directory is created with parents on first use; a concurrent
      creator winning the race is success, not an error
    - Target files are opened with exclusive create ("xb"): an existing file is never
      overwritten, a name collision draws a new token
    - A rejected or failed write leaves nothing behind (partial file unlinked)
    - The running byte count is enforced during the copy, not only the declared size

Design Decisions:
    - Blocking file IO; the API layer runs store_short in the threadpool
    - No checksum of written bytes
"""

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from app.core.domain_types import UploadState
from app.core.errors import FileTooLargeError, UploadError
from app.core.upload_policy import (
    MAX_SHORT_SIZE_BYTES,
    build_short_filename,
    find_orphaned_files,
    short_public_url,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
MAX_NAME_ATTEMPTS = 5


@dataclass(frozen=True)
class StoredShort:
    """A video file persisted under the shorts directory."""
    filename: str
    stored_path: Path
    original_name: str
    mime_type: str
    size_bytes: int

    @property
    def public_url(self) -> str:
        return short_public_url(self.filename)


def ensure_upload_dir(directory: Path) -> Path:
    """Create directory (and parents) if missing. Idempotent and race-safe."""
    os.makedirs(directory, exist_ok=True)
    return directory


def _open_unique(directory: Path, user_id: object | None, original_name: str):
    for attempt in range(1, MAX_NAME_ATTEMPTS + 1):
        filename = build_short_filename(user_id, original_name)
        path = directory / filename
        try:
            return filename, path, open(path, "xb")
        except FileExistsError:
            logger.warning(
                f"Upload name collision on attempt {attempt}, drawing a new token",
                extra={"filename": filename},
            )
    raise UploadError("Could not allocate a unique file name")


def store_short(
    source: BinaryIO,
    directory: Path,
    user_id: object | None,
    original_name: str,
    mime_type: str,
    max_bytes: int = MAX_SHORT_SIZE_BYTES,
) -> StoredShort:
    """Copy source into a freshly named file under directory."""
    ensure_upload_dir(directory)
    filename, path, target = _open_unique(directory, user_id, original_name)
    logger.info(
        "Writing uploaded short",
        extra={"filename": filename, "upload_state": UploadState.WRITING.value},
    )
    written = 0
    try:
        with target:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise FileTooLargeError(max_bytes)
                target.write(chunk)
    except UploadError:
        path.unlink(missing_ok=True)
        raise
    except OSError as e:
        path.unlink(missing_ok=True)
        logger.error(f"Failed to write upload {filename}: {e}")
        raise UploadError(f"Failed to store file: {e.strerror or e}")
    return StoredShort(
        filename=filename,
        stored_path=path,
        original_name=original_name,
        mime_type=mime_type,
        size_bytes=written,
    )


def upload_dir_writable(directory: Path) -> bool:
    """Readiness check: the shorts dir exists (or can be created) and accepts writes."""
    try:
        ensure_upload_dir(directory)
    except OSError as e:
        logger.error(f"Upload directory {directory} unavailable: {e}")
        return False
    return os.access(directory, os.W_OK)


def discard_stored_file(path: Path) -> bool:
    """Remove a stored upload whose downstream processing failed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    logger.info("Discarded stored upload", extra={"filename": path.name})
    return True


def list_stored_files(directory: Path) -> dict[str, float]:
    """filename -> mtime for regular files under directory ({} if missing)."""
    if not directory.is_dir():
        return {}
    return {
        entry.name: entry.stat().st_mtime
        for entry in directory.iterdir()
        if entry.is_file()
    }


def remove_orphans(
    directory: Path,
    referenced: set[str],
    min_age_seconds: float,
    now: float | None = None,
) -> list[str]:
    """Delete unreferenced files older than min_age_seconds. Returns removed names."""
    orphans = find_orphaned_files(
        list_stored_files(directory), referenced,
        now if now is not None else time.time(), min_age_seconds,
    )
    removed = []
    for name in orphans:
        if discard_stored_file(directory / name):
            removed.append(name)
    return removed
