# =============================================================================
# core/models/event.py - Event, Speaker and Presentation Schemas
# =============================================================================
# Events are mirrored from Luma and are read-only here except for the
# premium-grant settings. Speakers and presentations are curated locally
# and belong to one event (keyed by the event's Luma api_id).
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class EventLocation(BaseModel):
    city: str | None = None
    region: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    full_address: str | None = None


class EventResponse(BaseModel):
    id: UUID
    api_id: str
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    cover_url: str | None = None
    url: str | None = None
    timezone: str | None = None
    location: EventLocation | None = None
    visibility: str | None = None
    meeting_url: str | None = None
    calendar_api_id: str | None = None
    last_attendance_sync: datetime | None = None
    grants_premium_access: bool = False
    premium_ticket_types: list[str] = Field(default_factory=list)
    premium_expires_at: datetime | None = None

    model_config = {"from_attributes": True}


class EventList(BaseModel):
    events: list[EventResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


class EventPremiumSettings(BaseModel):
    """
    Which ticket types of an event grant premium, and until when.

    With no expiry, the grant lasts until the end of the event's year.
    """
    grants_premium_access: bool
    premium_ticket_types: list[str] = Field(default_factory=list)
    premium_expires_at: datetime | None = None


# =============================================================================
# Speakers
# =============================================================================

class SpeakerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    title: str | None = Field(default=None, max_length=255)
    company: str | None = Field(default=None, max_length=255)
    bio: str | None = None
    photo_url: str | None = Field(default=None, max_length=500)
    person_id: UUID | None = Field(
        default=None,
        description="Directory person this speaker corresponds to, if any"
    )
    display_order: int = 0


class SpeakerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = Field(default=None, max_length=255)
    company: str | None = Field(default=None, max_length=255)
    bio: str | None = None
    photo_url: str | None = Field(default=None, max_length=500)
    person_id: UUID | None = None
    display_order: int | None = None


class SpeakerResponse(SpeakerCreate):
    id: UUID
    event_api_id: str


# =============================================================================
# Presentations
# =============================================================================

class PresentationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    speaker_ids: list[UUID] = Field(default_factory=list)
    display_order: int = 0


class PresentationUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    speaker_ids: list[UUID] | None = None
    display_order: int | None = None


class PresentationResponse(PresentationCreate):
    id: UUID
    event_api_id: str


class EventAgenda(BaseModel):
    """Event with its speakers and presentations, both in display order."""
    event: EventResponse
    speakers: list[SpeakerResponse] = Field(default_factory=list)
    presentations: list[PresentationResponse] = Field(default_factory=list)


class AttendeeResponse(BaseModel):
    guest_api_id: str
    user_email: str
    event_api_id: str
    registered_at: datetime | None = None
    ticket_type_id: str | None = None
    ticket_type_name: str | None = None
    person_slug: str | None = None
    person_name: str | None = None
