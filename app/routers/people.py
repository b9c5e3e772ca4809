# =============================================================================
# app/routers/people.py - Directory People Endpoints
# =============================================================================
# Public directory listing and profile pages. Profiles never 500 on
# incomplete data; they return a missing_profile panel instead.
# =============================================================================

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_optional_user_record
from app.dependencies import PaginationDep
from core.models.person import PersonList, PersonProfile
from core.services.person_service import PersonService

router = APIRouter()


@router.get("", response_model=PersonList)
async def list_people(
    pagination: PaginationDep,
    search: Annotated[str | None, Query(max_length=100, description="Match name, organization or title")] = None,
):
    """List directory people alphabetically."""
    return PersonService.list_people(page=pagination.page, limit=pagination.limit, search=search)


@router.get("/{slug}", response_model=PersonProfile)
async def get_person(
    slug: Annotated[str, Path(description="Person slug or Luma api_id")],
    viewer: Optional[dict[str, Any]] = Depends(get_optional_user_record),
):
    """
    Get a person's profile.

    Includes the linked account's public fields when there is one, and a
    missing_profile panel when the profile is incomplete.
    """
    return PersonService.get_profile(slug, viewer=viewer)


@router.get("/{slug}/events")
async def get_person_events(slug: Annotated[str, Path(description="Person slug")]):
    """Events the person attended, newest first."""
    return {"events": PersonService.events_for_person(slug)}
