# =============================================================================
# core/services/sync_service.py - Luma Directory Import
# =============================================================================
# Two ways to pull the directory from Luma:
#
#   reset_and_sync()  - admin "reset & sync". Clears people and attendance,
#                       re-imports events and people, and yields SyncEvents
#                       as it goes so the route can stream them.
#   refresh()         - periodic incremental upsert, no clearing. Run by the
#                       Celery beat schedule.
#
# Events are upserted rather than cleared so admin-owned columns (premium
# settings, speakers and presentations keyed on api_id) survive a reset.
# Events that disappeared from Luma are pruned.
#
# There is no checkpointing: a failure mid-way leaves the tables as far as
# the loop got and is reported as a final "error" event.
#
# ResetRun drives reset_and_sync() on its own thread and hands the events
# over through a queue, so the import finishes even if nobody is reading.
# =============================================================================

import logging
import queue
import threading
import time
from typing import Any, Iterator

from lib.supabase_client import SupabaseClient
from lib.luma_client import LumaClient
from lib.utils import utcnow_iso
from core.models.sync import SyncEvent, SyncEventType, SyncStats
from core.services.event_service import EventService, event_row_from_luma
from core.services.person_service import PersonService, person_row_from_luma
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "last_cache_update"

# Rows per upsert call
BATCH_SIZE = 50

# Progress bands: events fill 10-50, people 60-95
EVENTS_START, EVENTS_END = 10, 50
PEOPLE_START, PEOPLE_END = 60, 95


def _dedupe(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep the last row per api_id; Luma can repeat entries across pages."""
    by_id: dict[str, dict[str, Any]] = {}
    for row in rows:
        if row.get("api_id"):
            by_id[row["api_id"]] = row
    return list(by_id.values())


def _batches(rows: list[dict[str, Any]], size: int = BATCH_SIZE) -> Iterator[list[dict[str, Any]]]:
    for i in range(0, len(rows), size):
        yield rows[i:i + size]


def _scaled(done: int, total: int, start: int, end: int) -> int:
    if total <= 0:
        return end
    return start + int((end - start) * done / total)


class SyncService:
    """Service for importing the directory from Luma."""

    @staticmethod
    def reset_and_sync(luma: LumaClient | None = None) -> Iterator[SyncEvent]:
        """
        Clear and re-import the directory, yielding progress.

        The last event yielded is always COMPLETE or ERROR.

        Example:
            for event in SyncService.reset_and_sync():
                print(event.progress, event.message)
        """
        started = time.monotonic()
        stats = SyncStats()
        owns_client = luma is None

        try:
            yield SyncEvent(type=SyncEventType.STATUS, message="Starting reset & sync", progress=0)
            luma = luma or LumaClient.from_settings()

            yield SyncEvent(type=SyncEventType.STATUS, message="Clearing people and attendance", progress=2)
            SupabaseClient.clear_table("attendance")
            SupabaseClient.clear_table("people")

            yield SyncEvent(type=SyncEventType.STATUS, message="Fetching events from Luma", progress=5)
            event_rows = _dedupe([event_row_from_luma(e) for e in luma.list_events()])
            yield SyncEvent(
                type=SyncEventType.PROGRESS,
                message=f"Fetched {len(event_rows)} events",
                progress=EVENTS_START,
            )

            for batch in _batches(event_rows):
                stats.events += EventService.upsert_events(batch)
                yield SyncEvent(
                    type=SyncEventType.PROGRESS,
                    message=f"Imported {stats.events}/{len(event_rows)} events",
                    progress=_scaled(stats.events, len(event_rows), EVENTS_START, EVENTS_END),
                )

            pruned = SyncService._prune_events({row["api_id"] for row in event_rows})
            if pruned:
                yield SyncEvent(
                    type=SyncEventType.STATUS,
                    message=f"Removed {pruned} events no longer on Luma",
                    progress=EVENTS_END,
                )

            yield SyncEvent(type=SyncEventType.STATUS, message="Fetching people from Luma", progress=55)
            people_rows = _dedupe([person_row_from_luma(p) for p in luma.list_people()])
            yield SyncEvent(
                type=SyncEventType.PROGRESS,
                message=f"Fetched {len(people_rows)} people",
                progress=PEOPLE_START,
            )

            for batch in _batches(people_rows):
                stats.people += PersonService.upsert_people(batch)
                yield SyncEvent(
                    type=SyncEventType.PROGRESS,
                    message=f"Imported {stats.people}/{len(people_rows)} people",
                    progress=_scaled(stats.people, len(people_rows), PEOPLE_START, PEOPLE_END),
                )

            linked = SyncService._relink_users()
            SupabaseClient.set_cache_metadata(LAST_SYNC_KEY, utcnow_iso())

            stats.duration_seconds = round(time.monotonic() - started, 2)
            logger.info(
                f"Reset & sync finished: {stats.events} events, {stats.people} people, "
                f"{linked} accounts linked in {stats.duration_seconds}s"
            )
            yield SyncEvent(
                type=SyncEventType.COMPLETE,
                message=f"Sync completed: {stats.events} events and {stats.people} people imported",
                progress=100,
                data=stats.model_dump(),
            )
        except Exception as e:
            logger.exception("Reset & sync failed")
            yield SyncEvent(
                type=SyncEventType.ERROR,
                message=f"Sync failed: {e}",
                data=stats.model_dump(),
            )
        finally:
            if owns_client and luma is not None:
                luma.close()

    @staticmethod
    def refresh() -> dict[str, Any]:
        """
        Upsert events and people without clearing anything.

        Returns:
            SyncStats as a dict
        """
        started = time.monotonic()
        stats = SyncStats()

        with LumaClient.from_settings() as luma:
            event_rows = _dedupe([event_row_from_luma(e) for e in luma.list_events()])
            for batch in _batches(event_rows):
                stats.events += EventService.upsert_events(batch)

            people_rows = _dedupe([person_row_from_luma(p) for p in luma.list_people()])
            for batch in _batches(people_rows):
                stats.people += PersonService.upsert_people(batch)

        SyncService._relink_users()
        SupabaseClient.set_cache_metadata(LAST_SYNC_KEY, utcnow_iso())

        stats.duration_seconds = round(time.monotonic() - started, 2)
        logger.info(f"Directory refresh: {stats.events} events, {stats.people} people")
        return stats.model_dump()

    @staticmethod
    def last_sync_time() -> str | None:
        return SupabaseClient.get_cache_metadata(LAST_SYNC_KEY)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _prune_events(keep: set[str]) -> int:
        client = SupabaseClient.get_client()
        existing = client.table("events").select("api_id").execute().data or []
        stale = [row["api_id"] for row in existing if row["api_id"] not in keep]
        if stale:
            client.table("events").delete().in_("api_id", stale).execute()
            logger.info(f"Pruned {len(stale)} events missing from Luma")
        return len(stale)

    @staticmethod
    def _relink_users() -> int:
        """Re-attach accounts to their person after people were reloaded."""
        client = SupabaseClient.get_client()
        users = client.table("users").select("*").is_("person_id", "null").execute().data or []
        linked = 0
        for user in users:
            if UserService.link_person(user).get("person_id"):
                linked += 1
        return linked


class ResetRun:
    """
    A reset & sync running on a background thread.

    Readers consume events with stream(); abandoning the stream leaves the
    import running. The terminal event is queued only after reset_and_sync()
    has returned, so the Luma client is already closed when it arrives.

    Example:
        run = ResetRun().start()
        for event in run.stream():
            print(event.progress, event.message)
    """

    def __init__(self, luma: LumaClient | None = None):
        self._luma = luma
        self._events: queue.Queue[SyncEvent] = queue.Queue()
        self._thread = threading.Thread(target=self._run, name="reset-and-sync", daemon=True)

    def start(self) -> "ResetRun":
        self._thread.start()
        return self

    def _run(self) -> None:
        terminal: SyncEvent | None = None
        for event in SyncService.reset_and_sync(luma=self._luma):
            if event.is_terminal:
                terminal = event
            else:
                self._events.put(event)
        self._events.put(terminal)

    def stream(self) -> Iterator[SyncEvent]:
        """Yield events until the terminal one."""
        while True:
            event = self._events.get()
            yield event
            if event.is_terminal:
                return

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the import to finish. Returns False on timeout."""
        self._thread.join(timeout)
        return not self._thread.is_alive()
