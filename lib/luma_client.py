# =============================================================================
# lib/luma_client.py - Luma Public API Client
# =============================================================================
# Thin httpx wrapper around the Luma calendar API, the source of events,
# people and event guests.
#
# List endpoints are cursor-paginated:
#   {"entries": [...], "has_more": true, "next_cursor": "..."}
# and the next page is requested with ?pagination_cursor=<next_cursor>.
#
# Usage:
#   with LumaClient.from_settings() as luma:
#       for entry in luma.list_events():
#           print(entry["event"]["name"])
# =============================================================================

import logging
from typing import Any, Iterator

import httpx

from app.config import settings
from app.exceptions import ExternalServiceError, ServiceNotConfiguredError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Luma"


class LumaClient:
    """
    Client for the Luma public API.

    Accepts an injected httpx.Client so tests can drive it with
    httpx.MockTransport.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.lu.ma/public/v1",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=timeout)
        self._headers = {
            "x-luma-api-key": api_key,
            "accept": "application/json",
        }

    @classmethod
    def from_settings(cls) -> "LumaClient":
        """
        Build a client from LUMA_API_KEY / LUMA_API_BASE_URL.

        Raises:
            ServiceNotConfiguredError: If LUMA_API_KEY is unset
        """
        if not settings.LUMA_API_KEY:
            raise ServiceNotConfiguredError(SERVICE_NAME, "LUMA_API_KEY")
        return cls(
            api_key=settings.LUMA_API_KEY,
            base_url=settings.LUMA_API_BASE_URL,
            timeout=settings.LUMA_TIMEOUT_SECONDS,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "LumaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def request(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        GET a Luma endpoint and return the decoded JSON body.

        Raises:
            ExternalServiceError: On a non-2xx answer (upstream status
                forwarded) or a connection failure (502)
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}

        try:
            response = self._http.get(url, params=clean_params, headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Luma {path} answered {e.response.status_code}: {e.response.text[:200]}")
            raise ExternalServiceError(
                SERVICE_NAME,
                e.response.text or e.response.reason_phrase,
                upstream_status=e.response.status_code,
            )
        except httpx.RequestError as e:
            logger.error(f"Luma {path} request failed: {e}")
            raise ExternalServiceError(SERVICE_NAME, str(e))

        return response.json()

    def iter_entries(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """
        Yield every entry of a paginated list endpoint.

        Stops when has_more is false, when the cursor is missing, or when
        the API hands back a cursor it already gave us.
        """
        query = dict(params or {})
        seen_cursors: set[str] = set()
        page = 0

        while True:
            body = self.request(path, query)
            page += 1
            entries = body.get("entries") or []
            logger.debug(f"Luma {path} page {page}: {len(entries)} entries")
            yield from entries

            cursor = body.get("next_cursor")
            if not body.get("has_more") or not cursor or cursor in seen_cursors:
                break
            seen_cursors.add(cursor)
            query["pagination_cursor"] = cursor

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    def list_events(self) -> list[dict[str, Any]]:
        """All calendar events, as raw entries ({"api_id", "event": {...}})."""
        return list(self.iter_entries("calendar/list-events"))

    def list_people(self) -> list[dict[str, Any]]:
        """All calendar people, as raw entries ({"api_id", "email", "user": {...}})."""
        return list(self.iter_entries("calendar/list-people"))

    def get_event(self, api_id: str) -> dict[str, Any]:
        """Single event with hosts: {"event": {...}, "hosts": [...]}."""
        return self.request("event/get", {"api_id": api_id})

    def list_guests(self, event_api_id: str) -> list[dict[str, Any]]:
        """All guests of an event, as raw entries ({"api_id", "guest": {...}})."""
        return list(self.iter_entries("event/get-guests", {"event_api_id": event_api_id}))
