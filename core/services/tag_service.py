# =============================================================================
# core/services/tag_service.py - Post Tags
# =============================================================================
# Tags are free text, normalized to lowercase and created on first use.
# Posts link to tags through post_tags.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def normalize_tag(text: str) -> str:
    return " ".join(text.strip().lower().split())


class TagService:
    """Service for tags and the post_tags relation."""

    @staticmethod
    def list_tags(search: str | None = None) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        query = client.table("tags").select("*")
        if search:
            query = query.ilike("text", f"%{normalize_tag(search)}%")
        return query.order("text").execute().data or []

    @staticmethod
    def get_or_create(text: str) -> dict[str, Any]:
        normalized = normalize_tag(text)
        tag = SupabaseClient.fetch_one("tags", "text", normalized)
        if tag:
            return tag

        client = SupabaseClient.get_client()
        response = client.table("tags").insert({"text": normalized}).execute()
        logger.info(f"Created tag '{normalized}'")
        return response.data[0]

    @staticmethod
    def set_post_tags(post_id: str, tags: list[str]) -> list[str]:
        """Replace a post's tags. Returns the normalized tag texts in input order."""
        client = SupabaseClient.get_client()
        client.table("post_tags").delete().eq("post_id", str(post_id)).execute()

        texts: list[str] = []
        for raw in tags:
            normalized = normalize_tag(raw)
            if normalized and normalized not in texts:
                texts.append(normalized)

        links = [{"post_id": str(post_id), "tag_id": TagService.get_or_create(t)["id"]} for t in texts]
        if links:
            client.table("post_tags").insert(links).execute()
        return texts

    @staticmethod
    def tags_for_posts(post_ids: list[str]) -> dict[str, list[str]]:
        """Map of post id -> tag texts, for a page of posts."""
        if not post_ids:
            return {}

        client = SupabaseClient.get_client()
        links = (
            client.table("post_tags")
            .select("post_id, tag_id")
            .in_("post_id", [str(p) for p in post_ids])
            .execute()
            .data
            or []
        )
        tag_ids = list({str(link["tag_id"]) for link in links})
        if not tag_ids:
            return {}

        tags = client.table("tags").select("id, text").in_("id", tag_ids).execute().data or []
        text_by_id = {str(t["id"]): t["text"] for t in tags}

        result: dict[str, list[str]] = {}
        for link in links:
            text = text_by_id.get(str(link["tag_id"]))
            if text:
                result.setdefault(str(link["post_id"]), []).append(text)
        return result

    @staticmethod
    def post_ids_for_tag(text: str) -> list[str]:
        tag = SupabaseClient.fetch_one("tags", "text", normalize_tag(text))
        if not tag:
            return []
        client = SupabaseClient.get_client()
        links = client.table("post_tags").select("post_id").eq("tag_id", tag["id"]).execute().data or []
        return [str(link["post_id"]) for link in links]
