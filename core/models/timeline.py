# =============================================================================
# core/models/timeline.py - About Page Timeline Schemas
# =============================================================================

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, Field


class TimelineEventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    date: dt.date
    image_url: str | None = Field(default=None, max_length=500)
    display_order: int = 0


class TimelineEventUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    date: dt.date | None = None
    image_url: str | None = Field(default=None, max_length=500)
    display_order: int | None = None


class TimelineEventResponse(TimelineEventCreate):
    id: UUID
    created_at: dt.datetime | None = None
