# =============================================================================
# core/services/company_service.py - Company Directory
# =============================================================================
# Handles company CRUD and company membership.
#
# Whoever creates a company becomes its first "admin" member. Edits and
# member management are allowed for system admins and for members whose
# company role is owner or admin.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.slugs import company_slug
from lib.utils import page_range, total_pages, utcnow_iso
from core.models.company import (
    MANAGING_ROLES,
    CompanyCreate,
    CompanyMemberCreate,
    CompanyMemberRole,
    CompanyMemberUpdate,
    CompanyUpdate,
)
from app.exceptions import (
    CompanyNotFoundError,
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class CompanyService:
    """Service for companies and their members."""

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def get_company(company_id: str) -> dict[str, Any]:
        company = SupabaseClient.fetch_one("companies", "id", str(company_id))
        if not company:
            raise CompanyNotFoundError(str(company_id))
        return company

    @staticmethod
    def get_by_slug(slug: str) -> dict[str, Any]:
        company = SupabaseClient.fetch_one("companies", "slug", slug.lower())
        if not company:
            raise CompanyNotFoundError(slug)
        return company

    @staticmethod
    def list_companies(page: int = 1, limit: int = 50, search: str | None = None) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        query = client.table("companies").select("*", count="exact")
        if search:
            term = search.strip().replace(",", " ")
            query = query.or_(f"name.ilike.%{term}%,industry.ilike.%{term}%")

        start, end = page_range(page, limit)
        response = query.order("name").range(start, end).execute()
        total = response.count or 0

        return {
            "companies": response.data or [],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages(total, limit),
        }

    @staticmethod
    def companies_for_user(user_id: str) -> list[dict[str, Any]]:
        """Companies the user is a member of, with their member role attached."""
        client = SupabaseClient.get_client()
        memberships = (
            client.table("company_members")
            .select("*")
            .eq("user_id", str(user_id))
            .execute()
            .data
            or []
        )
        if not memberships:
            return []

        role_by_company = {str(m["company_id"]): m["role"] for m in memberships}
        companies = (
            client.table("companies")
            .select("*")
            .in_("id", list(role_by_company))
            .order("name")
            .execute()
            .data
            or []
        )
        return [{**c, "member_role": role_by_company.get(str(c["id"]))} for c in companies]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @staticmethod
    def create_company(data: CompanyCreate, creator_id: str) -> dict[str, Any]:
        """
        Create a company and make the creator its admin member.

        Two companies with the same name share a slug; lookups by slug
        return the first match.
        """
        client = SupabaseClient.get_client()
        slug = company_slug(data.name)

        row = data.model_dump(mode="json")
        row["slug"] = slug
        response = client.table("companies").insert(row).execute()
        company = response.data[0]

        client.table("company_members").insert({
            "company_id": company["id"],
            "user_id": str(creator_id),
            "role": CompanyMemberRole.ADMIN.value,
            "is_public": True,
            "added_by": str(creator_id),
        }).execute()

        logger.info(f"Created company {company['id']} ({slug}) by user {creator_id}")
        return company

    @staticmethod
    def update_company(company_id: str, data: CompanyUpdate) -> dict[str, Any]:
        company = CompanyService.get_company(company_id)
        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return company

        if "name" in update_data:
            update_data["slug"] = company_slug(update_data["name"], fallback_id=str(company["id"]))

        update_data["updated_at"] = utcnow_iso()
        client = SupabaseClient.get_client()
        response = client.table("companies").update(update_data).eq("id", str(company_id)).execute()
        logger.info(f"Updated company {company_id}: {sorted(update_data)}")
        return response.data[0] if response.data else company

    @staticmethod
    def delete_company(company_id: str) -> None:
        CompanyService.get_company(company_id)
        client = SupabaseClient.get_client()
        client.table("company_members").delete().eq("company_id", str(company_id)).execute()
        client.table("companies").delete().eq("id", str(company_id)).execute()
        logger.info(f"Deleted company {company_id}")

    # -------------------------------------------------------------------------
    # Authorization
    # -------------------------------------------------------------------------

    @staticmethod
    def get_membership(company_id: str, user_id: str) -> dict[str, Any] | None:
        client = SupabaseClient.get_client()
        response = (
            client.table("company_members")
            .select("*")
            .eq("company_id", str(company_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    @staticmethod
    def ensure_can_manage(company_id: str, user: dict[str, Any]) -> None:
        """
        Raises:
            ForbiddenError: Unless the user is a system admin or a company owner/admin
        """
        if user.get("is_admin"):
            return
        membership = CompanyService.get_membership(company_id, str(user["id"]))
        if not membership or membership.get("role") not in MANAGING_ROLES:
            raise ForbiddenError("Only company admins can manage this company")

    # -------------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------------

    @staticmethod
    def list_members(company_id: str, include_private: bool = False) -> list[dict[str, Any]]:
        """Members with their user's display name; private members only when asked."""
        CompanyService.get_company(company_id)
        client = SupabaseClient.get_client()
        members = (
            client.table("company_members")
            .select("*")
            .eq("company_id", str(company_id))
            .order("created_at")
            .execute()
            .data
            or []
        )
        if not include_private:
            members = [m for m in members if m.get("is_public", True)]
        if not members:
            return []

        users = (
            client.table("users")
            .select("id, display_name, featured_image_url")
            .in_("id", [str(m["user_id"]) for m in members])
            .execute()
            .data
            or []
        )
        by_id = {str(u["id"]): u for u in users}
        return [
            {
                **m,
                "display_name": by_id.get(str(m["user_id"]), {}).get("display_name"),
                "featured_image_url": by_id.get(str(m["user_id"]), {}).get("featured_image_url"),
            }
            for m in members
        ]

    @staticmethod
    def add_member(company_id: str, data: CompanyMemberCreate, added_by: str) -> dict[str, Any]:
        CompanyService.get_company(company_id)
        user_id = str(data.user_id)
        if not SupabaseClient.fetch_one("users", "id", user_id):
            raise UserNotFoundError(user_id)
        if CompanyService.get_membership(company_id, user_id):
            raise DuplicateError("Company member", "user_id", user_id)

        client = SupabaseClient.get_client()
        response = client.table("company_members").insert({
            "company_id": str(company_id),
            "user_id": user_id,
            "role": data.role.value,
            "title": data.title,
            "is_public": data.is_public,
            "added_by": str(added_by),
        }).execute()
        logger.info(f"Added user {user_id} to company {company_id} as {data.role.value}")
        return response.data[0]

    @staticmethod
    def update_member(company_id: str, user_id: str, data: CompanyMemberUpdate) -> dict[str, Any]:
        membership = CompanyService.get_membership(company_id, user_id)
        if not membership:
            raise NotFoundError("Company member", str(user_id))

        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return membership

        client = SupabaseClient.get_client()
        response = (
            client.table("company_members")
            .update(update_data)
            .eq("id", membership["id"])
            .execute()
        )
        return response.data[0] if response.data else membership

    @staticmethod
    def remove_member(company_id: str, user_id: str) -> None:
        membership = CompanyService.get_membership(company_id, user_id)
        if not membership:
            raise NotFoundError("Company member", str(user_id))

        client = SupabaseClient.get_client()
        client.table("company_members").delete().eq("id", membership["id"]).execute()
        logger.info(f"Removed user {user_id} from company {company_id}")
