"""Short Upload Handler — receives, validates and persists one video file per request.

Invariants:
    - Every check in core/upload_policy.py runs before a byte reaches the shorts dir
    - Exactly one file is written on success; nothing is left on disk on rejection
    - Returns None when the request carries no file part at all

Design Decisions:
    - Called explicitly from the route body (not as a dependency) so form field
      validation happens before anything is stored
    - Multipart parsing is Starlette's; its failures surface as UploadError
"""

import logging

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings
from app.core.domain_types import AuthenticatedUser, UploadState
from app.core.errors import UploadError
from app.core.upload_policy import normalize_mime_type, validate_short_upload
from app.infrastructure.upload_storage import StoredShort, store_short

logger = logging.getLogger(__name__)


async def _file_parts(request: Request) -> list[tuple[str, UploadFile]]:
    try:
        form = await request.form()
    except StarletteHTTPException as e:
        raise UploadError(str(e.detail), "MALFORMED_MULTIPART")
    return [
        (name, value) for name, value in form.multi_items()
        if isinstance(value, UploadFile)
    ]


async def receive_short_upload(
    request: Request,
    user: AuthenticatedUser | None,
    settings: Settings,
) -> StoredShort | None:
    parts = await _file_parts(request)
    logger.info(
        f"Upload received with {len(parts)} file part(s)",
        extra={"upload_state": UploadState.RECEIVING.value},
    )
    if not parts:
        return None

    field_name, upload = parts[0]
    logger.debug(
        f"Validating upload field {field_name!r}",
        extra={"upload_state": UploadState.VALIDATING.value},
    )
    error = validate_short_upload(
        field_name,
        upload.content_type,
        upload.size,
        file_count=len(parts),
        max_bytes=settings.max_short_size_bytes,
    )
    if error:
        logger.warning(
            f"Upload rejected: {error.message}",
            extra={
                "upload_state": UploadState.REJECTED.value,
                "error_code": error.code,
                "mime_type": upload.content_type,
                "size_bytes": upload.size,
            },
        )
        raise error

    logger.info(
        "Upload accepted",
        extra={
            "upload_state": UploadState.ACCEPTED.value,
            "mime_type": upload.content_type,
        },
    )
    await upload.seek(0)
    try:
        stored = await run_in_threadpool(
            store_short,
            upload.file,
            settings.shorts_dir,
            user.id if user else None,
            upload.filename or "",
            normalize_mime_type(upload.content_type),
            settings.max_short_size_bytes,
        )
    except UploadError as e:
        logger.warning(
            f"Upload rejected during write: {e.message}",
            extra={"upload_state": UploadState.REJECTED.value, "error_code": e.code},
        )
        raise
    logger.info(
        "Upload stored",
        extra={
            "upload_state": UploadState.STORED.value,
            "filename": stored.filename,
            "size_bytes": stored.size_bytes,
        },
    )
    return stored
