"""Audit Trail — appends ActionLog rows inside the caller's transaction.

Invariants:
    - record_action only adds to the session; the caller commits
    - Every audit entry is mirrored as an INFO log line
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import ActionType
from app.models.action_log import ActionLog

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "SYSTEM"


def record_action(
    db: AsyncSession,
    action_type: ActionType,
    description: str,
    user_id: UUID | None = None,
    created_by: UUID | str | None = None,
    extra: dict | None = None,
) -> ActionLog:
    entry = ActionLog(
        action_type=action_type.value,
        description=description,
        user_id=user_id,
        created_by=str(created_by) if created_by else SYSTEM_ACTOR,
        extra=extra,
    )
    db.add(entry)
    logger.info(
        description,
        extra={
            "action_type": action_type.value,
            "user_id": str(user_id) if user_id else None,
        },
    )
    return entry
