# =============================================================================
# app/routers/unsplash.py - Unsplash Image Search Proxy
# =============================================================================
# Keeps the Unsplash access key server-side. Answers 503 when it's unset.
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_user_record
from lib import unsplash_client

router = APIRouter()


@router.get("/search")
async def search_images(
    query: Annotated[str, Query(min_length=1, max_length=200)],
    page: Annotated[int, Query(ge=1)] = 1,
    _: dict[str, Any] = Depends(get_current_user_record),
):
    """Search photos; the Unsplash response body is passed through."""
    return unsplash_client.search_photos(query, page=page)
