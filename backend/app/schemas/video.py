"""Video Schemas — response model for created shorts."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ShortResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    artist: str | None
    description: str | None
    duration: int | None
    url: str
    type: str
    created_at: datetime
