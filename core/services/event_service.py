# =============================================================================
# core/services/event_service.py - Events, Speakers & Presentations
# =============================================================================
# Events are mirrored from Luma by SyncService; this service maps Luma
# entries to rows and serves reads. Speakers and presentations are curated
# by admins and hang off an event's api_id.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.luma_client import LumaClient
from lib.utils import utcnow_iso
from core.models.event import (
    EventPremiumSettings,
    PresentationCreate,
    PresentationUpdate,
    SpeakerCreate,
    SpeakerUpdate,
)
from app.exceptions import EventNotFoundError, NotFoundError

logger = logging.getLogger(__name__)


def event_row_from_luma(entry: dict[str, Any]) -> dict[str, Any]:
    """
    Map a calendar/list-events entry to an events row.

    Example entry:
        {"api_id": "evt-1", "event": {"name": "Tech Meetup", "start_at": "...",
         "end_at": "...", "geo_address_json": {"city": "Sarasota"}, ...}}
    """
    event = entry.get("event") or entry
    address = event.get("geo_address_json") or {}
    location = None
    if address or event.get("geo_latitude") is not None:
        location = {
            "city": address.get("city"),
            "region": address.get("region"),
            "country": address.get("country"),
            "latitude": _to_float(event.get("geo_latitude")),
            "longitude": _to_float(event.get("geo_longitude")),
            "full_address": address.get("full_address"),
        }

    return {
        "api_id": event.get("api_id") or entry.get("api_id"),
        "title": event.get("name") or "Untitled event",
        "description": event.get("description"),
        "start_time": event.get("start_at"),
        "end_time": event.get("end_at") or event.get("start_at"),
        "cover_url": event.get("cover_url"),
        "url": event.get("url"),
        "timezone": event.get("timezone"),
        "location": location,
        "visibility": event.get("visibility"),
        "meeting_url": event.get("meeting_url") or event.get("zoom_meeting_url"),
        "calendar_api_id": event.get("calendar_api_id"),
        "created_at": event.get("created_at"),
    }


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class EventService:
    """Service for events and their agenda."""

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    @staticmethod
    def list_events(upcoming: bool | None = None, limit: int = 100) -> dict[str, Any]:
        """
        Events ordered by start time.

        upcoming=True lists events that haven't ended yet, soonest first;
        upcoming=False lists past events, most recent first.
        """
        client = SupabaseClient.get_client()
        query = client.table("events").select("*", count="exact")
        now = utcnow_iso()

        if upcoming is True:
            query = query.gte("end_time", now).order("start_time")
        elif upcoming is False:
            query = query.lt("end_time", now).order("start_time", desc=True)
        else:
            query = query.order("start_time", desc=True)

        response = query.limit(limit).execute()
        return {"events": response.data or [], "total": response.count or 0}

    @staticmethod
    def get_event(api_id: str) -> dict[str, Any]:
        event = SupabaseClient.fetch_one("events", "api_id", api_id)
        if not event:
            raise EventNotFoundError(api_id)
        return event

    @staticmethod
    def upsert_events(rows: list[dict[str, Any]]) -> int:
        """
        Insert or refresh events keyed on api_id.

        Only Luma-owned columns are written, so premium settings and
        last_attendance_sync survive a refresh.
        """
        rows = [r for r in rows if r.get("api_id")]
        if not rows:
            return 0
        client = SupabaseClient.get_client()
        client.table("events").upsert(rows, on_conflict="api_id").execute()
        return len(rows)

    @staticmethod
    def get_agenda(api_id: str) -> dict[str, Any]:
        """Event plus speakers and presentations in display order."""
        event = EventService.get_event(api_id)
        return {
            "event": event,
            "speakers": EventService.list_speakers(api_id),
            "presentations": EventService.list_presentations(api_id),
        }

    @staticmethod
    def get_live_details(api_id: str) -> dict[str, Any]:
        """Fresh event details (with hosts) straight from Luma."""
        with LumaClient.from_settings() as luma:
            return luma.get_event(api_id)

    @staticmethod
    def update_premium_settings(api_id: str, data: EventPremiumSettings) -> dict[str, Any]:
        EventService.get_event(api_id)
        client = SupabaseClient.get_client()
        response = (
            client.table("events")
            .update(data.model_dump(mode="json"))
            .eq("api_id", api_id)
            .execute()
        )
        logger.info(f"Updated premium settings for event {api_id}: grants={data.grants_premium_access}")
        return response.data[0]

    # -------------------------------------------------------------------------
    # Speakers
    # -------------------------------------------------------------------------

    @staticmethod
    def list_speakers(api_id: str) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = (
            client.table("speakers")
            .select("*")
            .eq("event_api_id", api_id)
            .order("display_order")
            .execute()
        )
        return response.data or []

    @staticmethod
    def create_speaker(api_id: str, data: SpeakerCreate) -> dict[str, Any]:
        EventService.get_event(api_id)
        client = SupabaseClient.get_client()
        row = {**data.model_dump(mode="json"), "event_api_id": api_id}
        response = client.table("speakers").insert(row).execute()
        logger.info(f"Added speaker '{data.name}' to event {api_id}")
        return response.data[0]

    @staticmethod
    def update_speaker(api_id: str, speaker_id: str, data: SpeakerUpdate) -> dict[str, Any]:
        speaker = EventService._get_child("speakers", "Speaker", api_id, speaker_id)
        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return speaker
        client = SupabaseClient.get_client()
        response = client.table("speakers").update(update_data).eq("id", speaker_id).execute()
        return response.data[0] if response.data else speaker

    @staticmethod
    def delete_speaker(api_id: str, speaker_id: str) -> None:
        EventService._get_child("speakers", "Speaker", api_id, speaker_id)
        client = SupabaseClient.get_client()
        client.table("speakers").delete().eq("id", speaker_id).execute()
        logger.info(f"Removed speaker {speaker_id} from event {api_id}")

    # -------------------------------------------------------------------------
    # Presentations
    # -------------------------------------------------------------------------

    @staticmethod
    def list_presentations(api_id: str) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = (
            client.table("presentations")
            .select("*")
            .eq("event_api_id", api_id)
            .order("display_order")
            .execute()
        )
        return response.data or []

    @staticmethod
    def create_presentation(api_id: str, data: PresentationCreate) -> dict[str, Any]:
        EventService.get_event(api_id)
        EventService._check_speakers(api_id, data.speaker_ids)
        client = SupabaseClient.get_client()
        row = {**data.model_dump(mode="json"), "event_api_id": api_id}
        response = client.table("presentations").insert(row).execute()
        logger.info(f"Added presentation '{data.title}' to event {api_id}")
        return response.data[0]

    @staticmethod
    def update_presentation(api_id: str, presentation_id: str, data: PresentationUpdate) -> dict[str, Any]:
        presentation = EventService._get_child("presentations", "Presentation", api_id, presentation_id)
        if data.speaker_ids is not None:
            EventService._check_speakers(api_id, data.speaker_ids)
        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return presentation
        client = SupabaseClient.get_client()
        response = client.table("presentations").update(update_data).eq("id", presentation_id).execute()
        return response.data[0] if response.data else presentation

    @staticmethod
    def delete_presentation(api_id: str, presentation_id: str) -> None:
        EventService._get_child("presentations", "Presentation", api_id, presentation_id)
        client = SupabaseClient.get_client()
        client.table("presentations").delete().eq("id", presentation_id).execute()
        logger.info(f"Removed presentation {presentation_id} from event {api_id}")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_child(table: str, label: str, api_id: str, child_id: str) -> dict[str, Any]:
        row = SupabaseClient.fetch_one(table, "id", str(child_id))
        if not row or row.get("event_api_id") != api_id:
            raise NotFoundError(label, str(child_id))
        return row

    @staticmethod
    def _check_speakers(api_id: str, speaker_ids: list) -> None:
        """Presentation speakers must belong to the same event."""
        known = {str(s["id"]) for s in EventService.list_speakers(api_id)}
        for speaker_id in speaker_ids:
            if str(speaker_id) not in known:
                raise NotFoundError("Speaker", str(speaker_id))
