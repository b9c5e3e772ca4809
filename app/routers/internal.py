# =============================================================================
# app/routers/internal.py - Reset & Sync Stream
# =============================================================================
# GET /_internal/reset-database streams the reset & sync as server-sent
# events. The browser opens it with EventSource and drives a progress bar:
#
#   data: {"type": "status", "message": "Fetching events from Luma", "progress": 5}
#   data: {"type": "progress", "message": "Imported 50/120 events", "progress": 26}
#   data: {"type": "complete", "message": "Sync completed: ...", "progress": 100, "data": {...}}
#
# The import runs on its own thread (ResetRun); the response only reads
# its events. A closed tab stops the stream, not the import.
# Nothing stops two admins from starting it at once.
# =============================================================================

import logging
from typing import Any, Iterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.auth import require_admin
from core.services.sync_service import ResetRun

logger = logging.getLogger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _stream(run: ResetRun) -> Iterator[str]:
    for event in run.stream():
        yield event.to_sse()


@router.get("/reset-database")
async def reset_database(admin: dict[str, Any] = Depends(require_admin)):
    """Clear and re-import the directory from Luma, streaming progress."""
    logger.warning(f"Admin {admin['id']} started reset & sync")
    run = ResetRun().start()
    return StreamingResponse(_stream(run), media_type="text/event-stream", headers=SSE_HEADERS)
