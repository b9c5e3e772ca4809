# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background syncs against Luma, run by the beat schedule in
# workers/config.py or queued from the admin area.
#
# Tasks:
# - sync_attendance_task: Mirror guest lists for recent or upcoming events
# - refresh_directory_task: Upsert events and people without clearing
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from app.exceptions import ExternalServiceError, ServiceNotConfiguredError

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="workers.tasks.sync_attendance_task")
def sync_attendance_task(self, upcoming: bool = False) -> dict[str, Any]:
    """
    Sync attendance for a batch of events.

    Args:
        upcoming: True for events not started yet, False for events that
            ended in the last 7 days

    Returns:
        Dict with success, events (count), failed (count) and per-event results
    """
    from core.services.attendance_service import AttendanceService

    logger.info(f"Attendance sync starting (upcoming={upcoming})")

    try:
        results = AttendanceService.sync_events(upcoming=upcoming)
    except ServiceNotConfiguredError as e:
        logger.warning(f"Attendance sync skipped: {e.message}")
        return {"success": False, "error": e.message}
    except ExternalServiceError as e:
        # No retry; the next scheduled run picks it up
        logger.error(f"Attendance sync {self.request.id} failed on Luma: {e.message}")
        return {"success": False, "error": e.message}

    failed = [r for r in results if r.get("error")]
    logger.info(f"Attendance sync finished: {len(results)} events, {len(failed)} failed")
    return {
        "success": not failed,
        "events": len(results),
        "failed": len(failed),
        "results": results,
    }


@shared_task(bind=True, name="workers.tasks.refresh_directory_task")
def refresh_directory_task(self) -> dict[str, Any]:
    """
    Incremental directory refresh from Luma.

    Returns:
        Dict with success plus the SyncStats counts
    """
    from core.services.sync_service import SyncService

    try:
        stats = SyncService.refresh()
    except ServiceNotConfiguredError as e:
        logger.warning(f"Directory refresh skipped: {e.message}")
        return {"success": False, "error": e.message}
    except ExternalServiceError as e:
        logger.error(f"Directory refresh {self.request.id} failed on Luma: {e.message}")
        return {"success": False, "error": e.message}

    return {"success": True, **stats}
