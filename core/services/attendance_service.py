# =============================================================================
# core/services/attendance_service.py - Event Attendance Sync
# =============================================================================
# Pulls an event's guest list from Luma and mirrors the approved guests
# into the attendance table. Used by the hourly/6-hourly Celery tasks and
# by the admin "sync attendees" action.
#
# When the event grants premium access, approved guests holding one of the
# qualifying ticket types get a Luma premium grant on their account.
# =============================================================================

import logging
from datetime import timedelta
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.luma_client import LumaClient
from lib.utils import parse_datetime, utcnow, utcnow_iso
from core.services.event_service import EventService
from core.services.premium_service import PremiumService, default_grant_expiry

logger = logging.getLogger(__name__)

APPROVED = "approved"


def attendance_row(event_api_id: str, guest: dict[str, Any]) -> dict[str, Any]:
    ticket = guest.get("event_ticket") or {}
    return {
        "event_api_id": event_api_id,
        "guest_api_id": guest.get("api_id"),
        "user_email": (guest.get("email") or "").strip().lower(),
        "registered_at": guest.get("registered_at"),
        "approval_status": guest.get("approval_status"),
        "ticket_type_id": ticket.get("event_ticket_type_id"),
        "ticket_type_name": ticket.get("name"),
        "ticket_amount": ticket.get("amount") or 0,
        "ticket_discount": ticket.get("amount_discount") or 0,
    }


class AttendanceService:
    """Service for event attendance."""

    @staticmethod
    def sync_event(event_api_id: str, luma: LumaClient | None = None) -> dict[str, Any]:
        """
        Replace an event's attendance with its approved Luma guests.

        Returns:
            {"event_api_id", "attendees", "premium_granted"}
        """
        event = EventService.get_event(event_api_id)
        owns_client = luma is None
        luma = luma or LumaClient.from_settings()

        try:
            entries = luma.list_guests(event_api_id)
        finally:
            if owns_client:
                luma.close()

        guests = [
            entry.get("guest") or entry
            for entry in entries
            if (entry.get("guest") or entry).get("approval_status") == APPROVED
        ]
        rows = [attendance_row(event_api_id, guest) for guest in guests if guest.get("email")]

        client = SupabaseClient.get_client()
        client.table("attendance").delete().eq("event_api_id", event_api_id).execute()
        if rows:
            client.table("attendance").insert(rows).execute()

        premium_granted = AttendanceService._grant_ticket_premium(event, rows)

        client.table("events").update({"last_attendance_sync": utcnow_iso()}).eq("api_id", event_api_id).execute()

        logger.info(
            f"Synced {len(rows)} attendees for event {event_api_id}"
            + (f", granted premium to {premium_granted} users" if premium_granted else "")
        )
        return {"event_api_id": event_api_id, "attendees": len(rows), "premium_granted": premium_granted}

    @staticmethod
    def _grant_ticket_premium(event: dict[str, Any], rows: list[dict[str, Any]]) -> int:
        ticket_types = set(event.get("premium_ticket_types") or [])
        if not event.get("grants_premium_access") or not ticket_types:
            return 0

        expires_at = parse_datetime(event.get("premium_expires_at")) or default_grant_expiry(event["start_time"])
        granted = 0
        for row in rows:
            if row.get("ticket_type_id") not in ticket_types:
                continue
            user = SupabaseClient.fetch_one("users", "email", row["user_email"])
            if user and PremiumService.grant_from_ticket(user, expires_at):
                granted += 1
        return granted

    @staticmethod
    def sync_events(upcoming: bool, window_days: int = 7) -> list[dict[str, Any]]:
        """
        Sync attendance for a batch of events.

        upcoming=True: events that haven't started yet.
        upcoming=False: events that ended within the last `window_days`.

        A failing event is logged and skipped so the rest still sync.
        """
        client = SupabaseClient.get_client()
        now = utcnow()
        query = client.table("events").select("api_id")
        if upcoming:
            query = query.gte("start_time", now.isoformat())
        else:
            query = query.lt("end_time", now.isoformat()).gte(
                "end_time", (now - timedelta(days=window_days)).isoformat()
            )
        events = query.execute().data or []

        results = []
        with LumaClient.from_settings() as luma:
            for event in events:
                try:
                    results.append(AttendanceService.sync_event(event["api_id"], luma=luma))
                except Exception as e:
                    logger.error(f"Attendance sync failed for event {event['api_id']}: {e}")
                    results.append({"event_api_id": event["api_id"], "error": str(e)})
        return results

    @staticmethod
    def list_attendees(event_api_id: str) -> list[dict[str, Any]]:
        """Attendees with their directory person's name and slug where known."""
        EventService.get_event(event_api_id)
        client = SupabaseClient.get_client()
        rows = (
            client.table("attendance")
            .select("*")
            .eq("event_api_id", event_api_id)
            .order("registered_at")
            .execute()
            .data
            or []
        )
        emails = [r["user_email"] for r in rows if r.get("user_email")]
        people = []
        if emails:
            people = (
                client.table("people")
                .select("email, slug, user_name")
                .in_("email", emails)
                .execute()
                .data
                or []
            )
        by_email = {p["email"]: p for p in people}

        return [
            {
                **row,
                "person_slug": by_email.get(row["user_email"], {}).get("slug"),
                "person_name": by_email.get(row["user_email"], {}).get("user_name"),
            }
            for row in rows
        ]
