"""Shorts Service — turns a stored upload into a published short and sweeps orphans.

Invariants:
    - A short row always points at a file that was stored for this request
    - If persisting the row fails, the stored file is discarded before re-raising
    - The orphan sweep never deletes a file referenced by a videos row, nor one
      younger than the grace period (it may still be mid-request)
"""

import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import ActionType, AuthenticatedUser, VideoType
from app.core.upload_policy import filename_from_public_url
from app.infrastructure.upload_storage import (
    StoredShort, discard_stored_file, remove_orphans,
)
from app.models.video import Video
from app.services.audit import record_action

logger = logging.getLogger(__name__)

DEFAULT_SHORT_DURATION = 15
MIN_SHORT_DURATION = 10
MAX_SHORT_DURATION = 30


def normalize_duration(raw: str | int | None) -> int:
    """Parse a duration in seconds; anything missing or out of 10..30 becomes 15."""
    try:
        duration = int(raw) if raw not in (None, "") else DEFAULT_SHORT_DURATION
    except (TypeError, ValueError):
        return DEFAULT_SHORT_DURATION
    if duration < MIN_SHORT_DURATION or duration > MAX_SHORT_DURATION:
        logger.warning(f"Short duration {duration}s out of range, using default")
        return DEFAULT_SHORT_DURATION
    return duration


async def create_short(
    db: AsyncSession,
    stored: StoredShort,
    author: AuthenticatedUser,
    title: str,
    artist: str,
    description: str = "",
    duration: str | int | None = None,
) -> Video:
    try:
        video = Video(
            title=title.strip(),
            artist=artist.strip(),
            description=(description or "").strip(),
            url=stored.public_url,
            type=VideoType.SHORT.value,
            duration=normalize_duration(duration),
            author_id=author.id,
        )
        db.add(video)
        await db.flush()
        record_action(
            db, ActionType.SHORT_CREATED,
            f'Short created: "{video.title}" by {video.artist}',
            user_id=author.id, created_by=author.id,
            extra={
                "video_id": str(video.id),
                "filename": stored.filename,
                "size_bytes": stored.size_bytes,
            },
        )
        await db.commit()
    except Exception:
        logger.error(
            "Short persistence failed, discarding stored file",
            extra={"filename": stored.filename},
        )
        discard_stored_file(stored.stored_path)
        raise
    await db.refresh(video)
    return video


async def referenced_short_files(db: AsyncSession) -> set[str]:
    result = await db.execute(
        select(Video.url).where(Video.type == VideoType.SHORT.value),
    )
    names = (filename_from_public_url(url) for url in result.scalars().all())
    return {name for name in names if name}


async def sweep_orphaned_shorts(
    db: AsyncSession,
    directory: Path,
    min_age_seconds: float,
    actor: AuthenticatedUser | None = None,
    now: float | None = None,
) -> list[str]:
    """Delete stored shorts that no video references. Returns removed names."""
    referenced = await referenced_short_files(db)
    removed = remove_orphans(directory, referenced, min_age_seconds, now=now)
    if removed:
        record_action(
            db, ActionType.ORPHANS_SWEPT,
            f"Removed {len(removed)} orphaned short file(s)",
            created_by=actor.id if actor else None,
            extra={"files": removed},
        )
        await db.commit()
    logger.info(f"Orphan sweep removed {len(removed)} file(s) from {directory}")
    return removed
