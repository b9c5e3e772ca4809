# =============================================================================
# lib/unsplash_client.py - Unsplash Image Search
# =============================================================================
# Proxies stock photo searches used when picking post and company images.
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import settings
from app.exceptions import ExternalServiceError, ServiceNotConfiguredError

logger = logging.getLogger(__name__)

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
RESULTS_PER_PAGE = 30


def search_photos(
    query: str,
    page: int = 1,
    http_client: httpx.Client | None = None,
) -> dict[str, Any]:
    """
    Search Unsplash photos.

    Returns Unsplash's body unchanged: {"total", "total_pages", "results"}.

    Raises:
        ServiceNotConfiguredError: If UNSPLASH_ACCESS_KEY is unset
        ExternalServiceError: On an upstream failure (status forwarded)
    """
    if not settings.UNSPLASH_ACCESS_KEY:
        raise ServiceNotConfiguredError("Unsplash", "UNSPLASH_ACCESS_KEY")

    headers = {
        "Authorization": f"Client-ID {settings.UNSPLASH_ACCESS_KEY}",
        "Accept-Version": "v1",
    }
    params = {"query": query, "per_page": RESULTS_PER_PAGE, "page": page}

    client = http_client or httpx.Client(timeout=15)
    try:
        response = client.get(UNSPLASH_SEARCH_URL, params=params, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(f"Unsplash search answered {e.response.status_code}")
        raise ExternalServiceError("Unsplash", e.response.text or e.response.reason_phrase,
                                   upstream_status=e.response.status_code)
    except httpx.RequestError as e:
        logger.error(f"Unsplash search failed: {e}")
        raise ExternalServiceError("Unsplash", str(e))
    finally:
        if http_client is None:
            client.close()

    body = response.json()
    logger.debug(f"Unsplash search '{query}' returned {len(body.get('results', []))} results")
    return body
