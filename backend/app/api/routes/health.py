"""Health & Readiness Checks — liveness plus the two things a request depends on.

Invariants:
    - GET /api/v1/health/ always returns 200 if the process is up
    - GET /api/v1/health/ready returns 503 unless both the database answers and
      the shorts directory accepts writes; each check is reported by name
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.infrastructure import database
from app.infrastructure.upload_storage import upload_dir_writable

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "throwback-api"}


@router.get("/ready")
async def readiness_check(settings: Settings = Depends(get_settings)):
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    uploads_ok = upload_dir_writable(settings.shorts_dir)
    checks = {
        "database": "healthy" if db_ok else "unavailable",
        "uploads": "writable" if uploads_ok else "unwritable",
    }
    if db_ok and uploads_ok:
        return {"status": "ready", "checks": checks}
    logger.warning(f"Readiness failed: {checks}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "checks": checks},
    )
