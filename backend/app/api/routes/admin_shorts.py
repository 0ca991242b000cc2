"""Admin Shorts Routes — multipart short upload and orphaned file sweep.

Invariants:
    - POST /api/admin/shorts: role gate -> form validation -> upload handler -> service
    - Blank title or artist fails form validation, before the upload handler runs
    - Upload failures answer 400 {"success": false, "message"} via the UploadError handler
    - A stored file whose video row cannot be saved is discarded (services/shorts.py)
"""

import logging

from fastapi import APIRouter, Depends, Form, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import require_admin
from app.api.upload import receive_short_upload
from app.config import Settings, get_settings
from app.core.domain_types import AuthenticatedUser
from app.core.errors import MissingVideoFileError
from app.infrastructure.database import get_db
from app.schemas.video import ShortResponse
from app.services import shorts

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/shorts", tags=["shorts"])

# at least one non-whitespace character; values are stored stripped
NON_BLANK = r"^\s*\S"


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_short(
    request: Request,
    title: str = Form(..., max_length=255, pattern=NON_BLANK),
    artist: str = Form(..., max_length=255, pattern=NON_BLANK),
    description: str = Form("", max_length=5000),
    duration: str | None = Form(None),
    admin: AuthenticatedUser = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    """Upload a video file (field "videoFile") and publish it as a short."""
    stored = await receive_short_upload(request, admin, settings)
    if stored is None:
        raise MissingVideoFileError()
    video = await shorts.create_short(
        db, stored, admin, title, artist, description, duration,
    )
    return {
        "success": True,
        "message": "Short created successfully",
        "data": ShortResponse.model_validate(video).model_dump(mode="json"),
    }


@router.post("/cleanup")
async def cleanup_orphaned_shorts(
    admin: AuthenticatedUser = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    """Remove stored short files that no video references."""
    removed = await shorts.sweep_orphaned_shorts(
        db, settings.shorts_dir, settings.orphan_grace_seconds, actor=admin,
    )
    return {"success": True, "removed": removed}
