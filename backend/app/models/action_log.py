"""ActionLog ORM — audit trail of account and content mutations.

Invariants:
    - Append-only: rows are never updated by the application
    - user_id is the subject of the action (nullable once the user is deleted);
      created_by is the actor's id or "SYSTEM"

Design Decisions:
    - No FK on user_id: audit rows outlive deleted users
    - JSON column for extra: change sets and upload metadata vary per action
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class ActionLog(Base):
    __tablename__ = "action_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    action_type: Mapped[str] = mapped_column(
        String(50), nullable=False, index=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True, index=True,
    )
    created_by: Mapped[str] = mapped_column(
        String(64), nullable=False, default="SYSTEM",
    )
    extra: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
