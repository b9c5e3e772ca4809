# =============================================================================
# app/routers/tags.py - Post Tag Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from core.models.post import TagResponse
from core.services.tag_service import TagService

router = APIRouter()


@router.get("", response_model=list[TagResponse])
async def list_tags(
    search: Annotated[str | None, Query(max_length=100, description="Prefix or substring to match")] = None,
):
    """Tags for autocomplete, alphabetical."""
    return TagService.list_tags(search=search)
