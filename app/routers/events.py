# =============================================================================
# app/routers/events.py - Event Endpoints
# =============================================================================
# Events are read-only mirrors of Luma. The agenda (speakers and
# presentations), premium settings and attendance sync are managed here by
# holders of manage_events.
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import require_permission
from core.models.event import (
    AttendeeResponse,
    EventAgenda,
    EventList,
    EventPremiumSettings,
    EventResponse,
    PresentationCreate,
    PresentationResponse,
    PresentationUpdate,
    SpeakerCreate,
    SpeakerResponse,
    SpeakerUpdate,
)
from core.services.attendance_service import AttendanceService
from core.services.event_service import EventService

logger = logging.getLogger(__name__)

router = APIRouter()

ApiId = Annotated[str, Path(description="Luma event api_id")]
manage_events = require_permission("manage_events")


# =============================================================================
# Reads
# =============================================================================

@router.get("", response_model=EventList)
async def list_events(
    upcoming: Annotated[bool | None, Query(description="true: not ended yet, false: past")] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    return EventService.list_events(upcoming=upcoming, limit=limit)


@router.get("/{api_id}", response_model=EventResponse)
async def get_event(api_id: ApiId):
    return EventService.get_event(api_id)


@router.get("/{api_id}/agenda", response_model=EventAgenda)
async def get_agenda(api_id: ApiId):
    """Event with its speakers and presentations in display order."""
    return EventService.get_agenda(api_id)


@router.get("/{api_id}/live")
async def get_live_details(api_id: ApiId):
    """Current event details and hosts, fetched from Luma on each call."""
    return EventService.get_live_details(api_id)


# =============================================================================
# Attendance
# =============================================================================

@router.get("/{api_id}/attendees", response_model=list[AttendeeResponse])
async def list_attendees(api_id: ApiId, _: dict[str, Any] = Depends(manage_events)):
    return AttendanceService.list_attendees(api_id)


@router.post("/{api_id}/sync-attendees")
async def sync_attendees(api_id: ApiId, record: dict[str, Any] = Depends(manage_events)):
    """Pull the guest list from Luma now instead of waiting for the schedule."""
    logger.info(f"User {record['id']} requested attendance sync for {api_id}")
    return AttendanceService.sync_event(api_id)


@router.put("/{api_id}/premium-settings", response_model=EventResponse)
async def update_premium_settings(
    api_id: ApiId,
    request: EventPremiumSettings,
    _: dict[str, Any] = Depends(manage_events),
):
    """Choose which ticket types grant premium access and until when."""
    return EventService.update_premium_settings(api_id, request)


# =============================================================================
# Speakers
# =============================================================================

@router.get("/{api_id}/speakers", response_model=list[SpeakerResponse])
async def list_speakers(api_id: ApiId):
    return EventService.list_speakers(api_id)


@router.post("/{api_id}/speakers", response_model=SpeakerResponse, status_code=status.HTTP_201_CREATED)
async def create_speaker(
    api_id: ApiId,
    request: SpeakerCreate,
    _: dict[str, Any] = Depends(manage_events),
):
    return EventService.create_speaker(api_id, request)


@router.patch("/{api_id}/speakers/{speaker_id}", response_model=SpeakerResponse)
async def update_speaker(
    api_id: ApiId,
    speaker_id: str,
    request: SpeakerUpdate,
    _: dict[str, Any] = Depends(manage_events),
):
    return EventService.update_speaker(api_id, speaker_id, request)


@router.delete("/{api_id}/speakers/{speaker_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_speaker(api_id: ApiId, speaker_id: str, _: dict[str, Any] = Depends(manage_events)):
    EventService.delete_speaker(api_id, speaker_id)


# =============================================================================
# Presentations
# =============================================================================

@router.get("/{api_id}/presentations", response_model=list[PresentationResponse])
async def list_presentations(api_id: ApiId):
    return EventService.list_presentations(api_id)


@router.post(
    "/{api_id}/presentations",
    response_model=PresentationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_presentation(
    api_id: ApiId,
    request: PresentationCreate,
    _: dict[str, Any] = Depends(manage_events),
):
    return EventService.create_presentation(api_id, request)


@router.patch("/{api_id}/presentations/{presentation_id}", response_model=PresentationResponse)
async def update_presentation(
    api_id: ApiId,
    presentation_id: str,
    request: PresentationUpdate,
    _: dict[str, Any] = Depends(manage_events),
):
    return EventService.update_presentation(api_id, presentation_id, request)


@router.delete("/{api_id}/presentations/{presentation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_presentation(
    api_id: ApiId,
    presentation_id: str,
    _: dict[str, Any] = Depends(manage_events),
):
    EventService.delete_presentation(api_id, presentation_id)
