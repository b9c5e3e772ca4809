# =============================================================================
# app/routers/posts.py - Bulletin Endpoints
# =============================================================================
# Public feed and post pages, plus authoring.
#
# Creating a post needs publish_content. Editing and deleting are allowed
# for the author, admins and holders of manage_posts.
# =============================================================================

from typing import Annotated, Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import get_current_user_record, get_optional_user_record, require_permission
from app.dependencies import PaginationDep
from core.models.post import PostCreate, PostList, PostResponse, PostStatus, PostUpdate
from core.services.post_service import PostService

router = APIRouter()


@router.get("", response_model=PostList)
async def list_posts(
    pagination: PaginationDep,
    tag: Annotated[str | None, Query(max_length=100, description="Only posts with this tag")] = None,
    viewer: Optional[dict[str, Any]] = Depends(get_optional_user_record),
):
    """
    Published posts, pinned first then newest.

    Members-only posts are listed for everyone but come back locked
    (is_locked=true, no body) unless the viewer has premium access.
    """
    return PostService.list_public(viewer=viewer, page=pagination.page, limit=pagination.limit, tag=tag)


@router.get("/manage", response_model=PostList)
async def list_posts_for_management(
    pagination: PaginationDep,
    post_status: Annotated[PostStatus | None, Query(alias="status")] = None,
    record: dict[str, Any] = Depends(require_permission("manage_posts")),
):
    """All posts including drafts."""
    return PostService.list_admin(record, status=post_status, page=pagination.page, limit=pagination.limit)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: Annotated[UUID, Path(description="Post UUID")],
    viewer: Optional[dict[str, Any]] = Depends(get_optional_user_record),
):
    """Drafts are 404 for everyone but their editors."""
    return PostService.get_post(str(post_id), viewer=viewer)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    request: PostCreate,
    record: dict[str, Any] = Depends(require_permission("publish_content")),
):
    return PostService.create_post(request, creator_id=str(record["id"]))


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: Annotated[UUID, Path(description="Post UUID")],
    request: PostUpdate,
    record: dict[str, Any] = Depends(get_current_user_record),
):
    return PostService.update_post(str(post_id), request, editor=record)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: Annotated[UUID, Path(description="Post UUID")],
    record: dict[str, Any] = Depends(get_current_user_record),
):
    PostService.delete_post(str(post_id), editor=record)
