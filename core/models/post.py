# =============================================================================
# core/models/post.py - Bulletin Post Schemas
# =============================================================================
# Posts make up the bulletin feed on the dashboard.
#
# Visibility rules (applied in PostService):
# - only published posts reach public listings
# - members_only posts reach non-members with the body stripped and
#   is_locked set, so the feed can show a teaser
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class PostStatus(str, Enum):
    """
    Publication state.

    - draft: visible to admins and authors only
    - published: visible in the bulletin
    """
    DRAFT = "draft"
    PUBLISHED = "published"


class PostCreate(BaseModel):
    """
    Example:
        {
            "title": "Meetup recap",
            "body": "Thanks to everyone who came...",
            "status": "published",
            "tags": ["meetup", "ai"]
        }
    """
    title: str = Field(..., min_length=1, max_length=255)
    summary: str | None = None
    body: str = Field(..., min_length=1)
    featured_image: str | None = Field(default=None, max_length=500)
    video_url: str | None = Field(default=None, max_length=500)
    cta_link: str | None = Field(default=None, max_length=500)
    cta_label: str | None = Field(default=None, max_length=255)
    is_pinned: bool = False
    members_only: bool = False
    status: PostStatus = PostStatus.DRAFT
    tags: list[str] = Field(default_factory=list)


class PostUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    summary: str | None = None
    body: str | None = Field(default=None, min_length=1)
    featured_image: str | None = Field(default=None, max_length=500)
    video_url: str | None = Field(default=None, max_length=500)
    cta_link: str | None = Field(default=None, max_length=500)
    cta_label: str | None = Field(default=None, max_length=255)
    is_pinned: bool | None = None
    members_only: bool | None = None
    status: PostStatus | None = None
    tags: list[str] | None = None


class PostResponse(BaseModel):
    id: UUID
    title: str
    summary: str | None = None
    body: str | None = Field(
        default=None,
        description="Null when the post is locked for the viewer"
    )
    featured_image: str | None = None
    video_url: str | None = None
    cta_link: str | None = None
    cta_label: str | None = None
    is_pinned: bool = False
    members_only: bool = False
    status: PostStatus
    creator_id: UUID | None = None
    tags: list[str] = Field(default_factory=list)
    is_locked: bool = False
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PostList(BaseModel):
    posts: list[PostResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    total_pages: int = Field(default=0, ge=0)


class TagResponse(BaseModel):
    id: UUID
    text: str
