# =============================================================================
# core/services/person_service.py - Directory People
# =============================================================================
# People are imported from Luma (see SyncService). This service maps Luma
# entries to rows, serves the directory listing and builds profile pages.
#
# A profile page never fails because data is incomplete: with no linked
# account or no display name it carries a MissingProfile panel instead.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.slugs import id_fragment, person_slug, slug_fragment
from lib.utils import page_range, total_pages
from core.models.person import MissingProfile
from core.services.premium_service import has_active_premium
from app.exceptions import PersonNotFoundError

logger = logging.getLogger(__name__)

# Columns of a linked user that may appear on a public profile
PUBLIC_USER_FIELDS = (
    "id", "display_name", "bio", "company_name", "featured_image_url",
    "cta_text", "custom_links",
)


def person_row_from_luma(entry: dict[str, Any]) -> dict[str, Any]:
    """
    Map a calendar/list-people entry to a people row.

    Example entry:
        {"api_id": "usr-1", "email": "Jane@Example.com", "created_at": "...",
         "user": {"name": "Jane Doe", "avatar_url": "...", "job_title": "CTO"}}
    """
    user = entry.get("user") or {}
    api_id = entry.get("api_id") or user.get("api_id")
    name = user.get("name") or user.get("full_name")

    return {
        "api_id": api_id,
        "email": (entry.get("email") or user.get("email") or "").strip().lower(),
        "user_name": name,
        "full_name": user.get("full_name") or name,
        "avatar_url": user.get("avatar_url"),
        "phone_number": user.get("phone_number"),
        "bio": user.get("bio"),
        "organization_name": user.get("organization_name"),
        "job_title": user.get("job_title"),
        "created_at": entry.get("created_at"),
        "slug": person_slug(name, api_id),
    }


def build_missing_profile(
    has_user: bool,
    has_name: bool,
    is_own_profile: bool = False,
) -> MissingProfile | None:
    """The fallback panel for an incomplete profile, or None if complete."""
    reasons = []
    if not has_user:
        reasons.append("no_linked_account")
    if not has_name:
        reasons.append("no_display_name")
    if not reasons:
        return None

    if is_own_profile:
        message = (
            "Your profile is missing some information from Luma. "
            "To complete your profile, please update your Luma account with your display name."
        )
    else:
        message = (
            "This profile is missing required information from Luma. "
            "To view this profile, the user needs to set up their Luma profile."
        )
    return MissingProfile(message=message, reasons=reasons)


class PersonService:
    """Service for directory people."""

    @staticmethod
    def list_people(page: int = 1, limit: int = 50, search: str | None = None) -> dict[str, Any]:
        """
        Paginated directory listing, alphabetical by name.

        Search matches name, organization and job title.
        """
        client = SupabaseClient.get_client()
        query = client.table("people").select("*", count="exact")
        if search:
            term = search.strip().replace(",", " ")
            query = query.or_(
                f"user_name.ilike.%{term}%,organization_name.ilike.%{term}%,job_title.ilike.%{term}%"
            )

        start, end = page_range(page, limit)
        response = query.order("user_name").range(start, end).execute()
        total = response.count or 0

        return {
            "people": response.data or [],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages(total, limit),
        }

    @staticmethod
    def get_by_slug(slug: str) -> dict[str, Any]:
        """
        Look a person up by slug, falling back to the Luma api_id so old
        links keep working.

        Raises:
            PersonNotFoundError: If neither matches
        """
        person = SupabaseClient.fetch_one("people", "slug", slug.lower())
        if not person:
            person = SupabaseClient.fetch_one("people", "api_id", slug)
        if not person:
            person = PersonService._by_fragment(slug)
        if not person:
            raise PersonNotFoundError(slug)
        return person

    @staticmethod
    def _by_fragment(slug: str) -> dict[str, Any] | None:
        """
        Find a renamed person by the id fragment at the end of an old slug.

        The fragment has to come from the person's api_id and point at
        exactly one person; anything else is treated as not found.
        """
        slug = slug.lower()
        fragment = slug_fragment(slug)
        name_part = slug[: -len(fragment) - 1] if fragment else ""
        if not fragment or not name_part or not all(c.isalnum() or c == "-" for c in name_part):
            return None

        client = SupabaseClient.get_client()
        candidates = client.table("people").select("*").ilike("slug", f"%-{fragment}").execute().data or []
        matches = [p for p in candidates if id_fragment(p.get("api_id")) == fragment]
        return matches[0] if len(matches) == 1 else None

    @staticmethod
    def upsert_people(rows: list[dict[str, Any]]) -> int:
        """Insert or refresh people rows keyed on api_id."""
        rows = [r for r in rows if r.get("api_id")]
        if not rows:
            return 0
        client = SupabaseClient.get_client()
        client.table("people").upsert(rows, on_conflict="api_id").execute()
        return len(rows)

    @staticmethod
    def get_by_api_id(api_id: str) -> dict[str, Any]:
        person = SupabaseClient.fetch_one("people", "api_id", api_id)
        if not person:
            raise PersonNotFoundError(api_id)
        return person

    @staticmethod
    def linked_user(person: dict[str, Any]) -> dict[str, Any] | None:
        """The account linked to this person, by person_id then by email."""
        user = SupabaseClient.fetch_one("users", "person_id", person["id"])
        if user is None and person.get("email"):
            user = SupabaseClient.fetch_one("users", "email", person["email"])
        return user

    @staticmethod
    def get_profile(slug: str, viewer: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Profile page payload for a person.

        Args:
            slug: Person slug (or api_id)
            viewer: The logged-in user's row, if any

        Returns:
            {"person", "user", "missing_profile", "events_attended"}
        """
        person = PersonService.get_by_slug(slug)
        user = PersonService.linked_user(person)

        display_name = (user or {}).get("display_name") or person.get("user_name")
        is_own = bool(viewer and user and str(viewer.get("id")) == str(user.get("id")))
        missing = build_missing_profile(
            has_user=user is not None,
            has_name=bool(display_name and display_name.strip()),
            is_own_profile=is_own,
        )
        if missing:
            logger.debug(f"Profile {person['slug']} incomplete: {missing.reasons}")

        user_summary = None
        if user:
            user_summary = {field: user.get(field) for field in PUBLIC_USER_FIELDS}
            user_summary["custom_links"] = user.get("custom_links") or []
            user_summary["has_premium"] = has_active_premium(user)
            if user.get("is_email_public"):
                user_summary["email"] = user.get("email")
            if user.get("is_phone_public"):
                user_summary["phone_number"] = user.get("phone_number")

        return {
            "person": person,
            "user": user_summary,
            "missing_profile": missing.model_dump() if missing else None,
            "events_attended": SupabaseClient.count_rows("attendance", "user_email", person.get("email")),
        }

    @staticmethod
    def events_for_person(slug: str) -> list[dict[str, Any]]:
        """Events the person attended, newest first."""
        person = PersonService.get_by_slug(slug)
        if not person.get("email"):
            return []

        client = SupabaseClient.get_client()
        attendance = (
            client.table("attendance")
            .select("event_api_id")
            .eq("user_email", person["email"])
            .execute()
            .data
            or []
        )
        event_ids = list({row["event_api_id"] for row in attendance})
        if not event_ids:
            return []

        response = (
            client.table("events")
            .select("*")
            .in_("api_id", event_ids)
            .order("start_time", desc=True)
            .execute()
        )
        return response.data or []
