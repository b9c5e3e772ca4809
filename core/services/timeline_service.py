# =============================================================================
# core/services/timeline_service.py - About Page Timeline
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from core.models.timeline import TimelineEventCreate, TimelineEventUpdate
from app.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class TimelineService:
    """Plain CRUD over timeline_events, read in display order."""

    @staticmethod
    def list_events() -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        response = (
            client.table("timeline_events")
            .select("*")
            .order("display_order")
            .order("date")
            .execute()
        )
        return response.data or []

    @staticmethod
    def get_event(event_id: str) -> dict[str, Any]:
        row = SupabaseClient.fetch_one("timeline_events", "id", str(event_id))
        if not row:
            raise NotFoundError("Timeline event", str(event_id))
        return row

    @staticmethod
    def create_event(data: TimelineEventCreate) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        response = client.table("timeline_events").insert(data.model_dump(mode="json")).execute()
        logger.info(f"Created timeline event '{data.title}'")
        return response.data[0]

    @staticmethod
    def update_event(event_id: str, data: TimelineEventUpdate) -> dict[str, Any]:
        row = TimelineService.get_event(event_id)
        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return row
        client = SupabaseClient.get_client()
        response = client.table("timeline_events").update(update_data).eq("id", str(event_id)).execute()
        return response.data[0] if response.data else row

    @staticmethod
    def delete_event(event_id: str) -> None:
        TimelineService.get_event(event_id)
        client = SupabaseClient.get_client()
        client.table("timeline_events").delete().eq("id", str(event_id)).execute()
        logger.info(f"Deleted timeline event {event_id}")
