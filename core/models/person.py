# =============================================================================
# core/models/person.py - Directory Person Schemas
# =============================================================================
# A Person is a directory profile imported from Luma. It may be linked to a
# User account (same email), which supplies the display name and the richer
# profile fields.
#
# When a profile can't be shown in full, PersonProfile carries a
# MissingProfile panel instead of the route failing.
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

LUMA_SETTINGS_URL = "https://lu.ma/settings"


class PersonResponse(BaseModel):
    """
    Directory entry as stored.

    Example:
        {
            "id": "6f1c...",
            "api_id": "usr-8fK2mQ",
            "slug": "jane-doe-8fk2mq",
            "user_name": "Jane Doe",
            "organization_name": "Acme",
            "job_title": "CTO"
        }
    """
    id: UUID
    api_id: str
    slug: str
    email: str | None = None
    user_name: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    organization_name: str | None = None
    job_title: str | None = None
    bio: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PersonList(BaseModel):
    people: list[PersonResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1)
    total_pages: int = Field(default=0, ge=0)


class MissingProfile(BaseModel):
    """Explanatory panel shown in place of an incomplete profile."""
    title: str = "Incomplete Profile"
    message: str
    update_url: str = LUMA_SETTINGS_URL
    reasons: list[str] = Field(default_factory=list)


class LinkedUserSummary(BaseModel):
    """Public slice of the linked account."""
    id: UUID
    display_name: str | None = None
    bio: str | None = None
    company_name: str | None = None
    featured_image_url: str | None = None
    email: str | None = None
    phone_number: str | None = None
    cta_text: str | None = None
    custom_links: list[dict] = Field(default_factory=list)
    has_premium: bool = False


class PersonProfile(BaseModel):
    """
    Profile page payload.

    `missing_profile` is set whenever the person has no linked account or
    no usable display name; clients render it instead of the details.
    """
    person: PersonResponse
    user: LinkedUserSummary | None = None
    missing_profile: MissingProfile | None = None
    events_attended: int = 0
