# =============================================================================
# core/services/post_service.py - Bulletin Posts
# =============================================================================
# Handles post CRUD and feed visibility.
#
# Public feed: published posts only, pinned first, then newest.
# Members-only posts stay in the feed for everyone but are locked (no body)
# for viewers without premium access.
# Drafts are visible to admins and to the post's creator.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import page_range, total_pages, utcnow_iso
from core.models.post import PostCreate, PostStatus, PostUpdate
from core.services.premium_service import can_view_members_content
from core.services.role_service import RoleService
from core.services.tag_service import TagService
from app.exceptions import ForbiddenError, PostNotFoundError

logger = logging.getLogger(__name__)


def present_post(
    post: dict[str, Any],
    tags: list[str],
    viewer_can_see_members: bool,
) -> dict[str, Any]:
    """Attach tags and lock members-only content for non-members."""
    locked = bool(post.get("members_only")) and not viewer_can_see_members
    result = {**post, "tags": tags, "is_locked": locked}
    if locked:
        result["body"] = None
        result["video_url"] = None
    return result


class PostService:
    """Service for bulletin posts."""

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def _page(
        query,
        page: int,
        limit: int,
        viewer: dict[str, Any] | None,
    ) -> dict[str, Any]:
        start, end = page_range(page, limit)
        response = (
            query.order("is_pinned", desc=True)
            .order("published_at", desc=True)
            .order("created_at", desc=True)
            .range(start, end)
            .execute()
        )
        posts = response.data or []
        total = response.count or 0
        tags = TagService.tags_for_posts([str(p["id"]) for p in posts])
        can_see = can_view_members_content(viewer)

        return {
            "posts": [present_post(p, tags.get(str(p["id"]), []), can_see) for p in posts],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages(total, limit),
        }

    @staticmethod
    def list_public(
        viewer: dict[str, Any] | None = None,
        page: int = 1,
        limit: int = 20,
        tag: str | None = None,
    ) -> dict[str, Any]:
        """Published posts for the bulletin, optionally filtered by tag."""
        client = SupabaseClient.get_client()
        query = (
            client.table("posts")
            .select("*", count="exact")
            .eq("status", PostStatus.PUBLISHED.value)
        )
        if tag:
            post_ids = TagService.post_ids_for_tag(tag)
            if not post_ids:
                return {"posts": [], "total": 0, "page": page, "limit": limit, "total_pages": 0}
            query = query.in_("id", post_ids)

        return PostService._page(query, page, limit, viewer)

    @staticmethod
    def list_admin(
        viewer: dict[str, Any],
        status: PostStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict[str, Any]:
        """All posts for the back office, optionally filtered by status."""
        client = SupabaseClient.get_client()
        query = client.table("posts").select("*", count="exact")
        if status is not None:
            query = query.eq("status", status.value)
        return PostService._page(query, page, limit, viewer)

    @staticmethod
    def get_post(post_id: str, viewer: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Raises:
            PostNotFoundError: If missing, or a draft the viewer may not see
        """
        post = SupabaseClient.fetch_one("posts", "id", str(post_id))
        if not post:
            raise PostNotFoundError(str(post_id))

        if post.get("status") != PostStatus.PUBLISHED.value and not PostService._is_editor(post, viewer):
            raise PostNotFoundError(str(post_id))

        tags = TagService.tags_for_posts([str(post["id"])]).get(str(post["id"]), [])
        return present_post(post, tags, can_view_members_content(viewer))

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @staticmethod
    def create_post(data: PostCreate, creator_id: str) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        row = data.model_dump(exclude={"tags"}, mode="json")
        row["creator_id"] = str(creator_id)
        if data.status == PostStatus.PUBLISHED:
            row["published_at"] = utcnow_iso()

        response = client.table("posts").insert(row).execute()
        post = response.data[0]
        tags = TagService.set_post_tags(str(post["id"]), data.tags)

        logger.info(f"Created {data.status.value} post {post['id']} by user {creator_id}")
        return {**post, "tags": tags, "is_locked": False}

    @staticmethod
    def update_post(post_id: str, data: PostUpdate, editor: dict[str, Any]) -> dict[str, Any]:
        post = SupabaseClient.fetch_one("posts", "id", str(post_id))
        if not post:
            raise PostNotFoundError(str(post_id))
        PostService.ensure_can_edit(post, editor)

        update_data = data.model_dump(exclude_unset=True, exclude={"tags"}, mode="json")
        if (
            data.status == PostStatus.PUBLISHED
            and post.get("status") != PostStatus.PUBLISHED.value
            and not post.get("published_at")
        ):
            update_data["published_at"] = utcnow_iso()

        client = SupabaseClient.get_client()
        if update_data:
            update_data["updated_at"] = utcnow_iso()
            response = client.table("posts").update(update_data).eq("id", str(post_id)).execute()
            post = response.data[0] if response.data else post

        if data.tags is not None:
            tags = TagService.set_post_tags(str(post_id), data.tags)
        else:
            tags = TagService.tags_for_posts([str(post_id)]).get(str(post_id), [])

        logger.info(f"Updated post {post_id}: {sorted(update_data)}")
        return {**post, "tags": tags, "is_locked": False}

    @staticmethod
    def delete_post(post_id: str, editor: dict[str, Any]) -> None:
        post = SupabaseClient.fetch_one("posts", "id", str(post_id))
        if not post:
            raise PostNotFoundError(str(post_id))
        PostService.ensure_can_edit(post, editor)

        client = SupabaseClient.get_client()
        client.table("post_tags").delete().eq("post_id", str(post_id)).execute()
        client.table("posts").delete().eq("id", str(post_id)).execute()
        logger.info(f"Deleted post {post_id}")

    # -------------------------------------------------------------------------
    # Authorization
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_editor(post: dict[str, Any], user: dict[str, Any] | None) -> bool:
        if not user:
            return False
        if user.get("is_admin") or str(post.get("creator_id")) == str(user.get("id")):
            return True
        return "manage_posts" in RoleService.get_user_permission_names(str(user["id"]))

    @staticmethod
    def ensure_can_edit(post: dict[str, Any], user: dict[str, Any]) -> None:
        """
        Raises:
            ForbiddenError: Unless admin, the creator, or holder of manage_posts
        """
        if not PostService._is_editor(post, user):
            raise ForbiddenError("You can only edit your own posts")
