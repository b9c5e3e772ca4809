# =============================================================================
# core/models/sync.py - Reset & Sync Progress Events
# =============================================================================
# The admin reset & sync streams these events as server-sent events:
#
#   data: {"type": "progress", "message": "Imported 40/120 events", "progress": 30}
#
# A stream always ends with exactly one "complete" or "error" event.
# =============================================================================

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SyncEventType(str, Enum):
    """
    - status: a phase started (no percentage change)
    - progress: percentage moved
    - complete: finished; data carries the counts
    - error: aborted; message carries the reason
    """
    STATUS = "status"
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"


TERMINAL_EVENT_TYPES = {SyncEventType.COMPLETE, SyncEventType.ERROR}


class SyncEvent(BaseModel):
    type: SyncEventType
    message: str
    progress: int | None = Field(default=None, ge=0, le=100)
    data: dict[str, Any] | None = None

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENT_TYPES

    def to_sse(self) -> str:
        """Render as one server-sent event frame."""
        payload = self.model_dump(mode="json", exclude_none=True)
        return f"data: {json.dumps(payload)}\n\n"


class SyncStats(BaseModel):
    events: int = 0
    people: int = 0
    duration_seconds: float = 0.0
