# =============================================================================
# app/routers/timeline.py - About Page Timeline Endpoints
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status

from app.auth import require_admin
from core.models.timeline import TimelineEventCreate, TimelineEventResponse, TimelineEventUpdate
from core.services.timeline_service import TimelineService

router = APIRouter()

TimelineId = Annotated[UUID, Path(description="Timeline event UUID")]


@router.get("", response_model=list[TimelineEventResponse])
async def list_timeline():
    return TimelineService.list_events()


@router.post("", response_model=TimelineEventResponse, status_code=status.HTTP_201_CREATED)
async def create_timeline_event(
    request: TimelineEventCreate,
    _: dict[str, Any] = Depends(require_admin),
):
    return TimelineService.create_event(request)


@router.patch("/{event_id}", response_model=TimelineEventResponse)
async def update_timeline_event(
    event_id: TimelineId,
    request: TimelineEventUpdate,
    _: dict[str, Any] = Depends(require_admin),
):
    return TimelineService.update_event(str(event_id), request)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_timeline_event(event_id: TimelineId, _: dict[str, Any] = Depends(require_admin)):
    TimelineService.delete_event(str(event_id))
