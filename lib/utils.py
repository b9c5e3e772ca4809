# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common helpers used across the application: id normalization, timestamps
# and page arithmetic for list endpoints.
# =============================================================================

import math
from datetime import datetime, timezone
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        company_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        company_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Timestamps
# =============================================================================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    return utcnow().isoformat()


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp as returned by Postgres or Luma.

    Naive values are assumed to be UTC. Luma uses a trailing "Z", which
    datetime.fromisoformat only accepts from Python 3.11, so it is
    rewritten first.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Pagination
# =============================================================================

def page_range(page: int, limit: int) -> tuple[int, int]:
    """
    Convert a 1-based page number to an inclusive row range for .range().

    Example:
        page_range(1, 20) -> (0, 19)
        page_range(3, 20) -> (40, 59)
    """
    start = (max(page, 1) - 1) * limit
    return start, start + limit - 1


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
