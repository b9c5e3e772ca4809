# =============================================================================
# core/models/company.py - Company Schemas
# =============================================================================
# Companies are created by users; the creator becomes the company's first
# admin member. Members with the admin or owner role may edit the company.
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from .user import CustomLink


class CompanyMemberRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    USER = "user"


# Roles that may edit the company and manage its members
MANAGING_ROLES = {CompanyMemberRole.OWNER.value, CompanyMemberRole.ADMIN.value}


class CompanyBase(BaseModel):
    description: str | None = None
    website: str | None = Field(default=None, max_length=255)
    logo_url: str | None = Field(default=None, max_length=500)
    featured_image_url: str | None = Field(default=None, max_length=500)
    address: str | None = None
    phone_number: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)
    industry: str | None = Field(default=None, max_length=100)
    size: str | None = Field(default=None, max_length=50)
    founded: str | None = Field(default=None, max_length=50)
    bio: str | None = None
    is_phone_public: bool = False
    is_email_public: bool = False
    cta_text: str | None = Field(default=None, max_length=255)
    custom_links: list[CustomLink] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class CompanyCreate(CompanyBase):
    """
    Example:
        {"name": "Smith & Sons", "website": "https://smith.example"}
    """
    name: str = Field(..., min_length=1, max_length=255)


class CompanyUpdate(BaseModel):
    """Partial update; the slug follows the name when the name changes."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    website: str | None = Field(default=None, max_length=255)
    logo_url: str | None = Field(default=None, max_length=500)
    featured_image_url: str | None = Field(default=None, max_length=500)
    address: str | None = None
    phone_number: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)
    industry: str | None = Field(default=None, max_length=100)
    size: str | None = Field(default=None, max_length=50)
    founded: str | None = Field(default=None, max_length=50)
    bio: str | None = None
    is_phone_public: bool | None = None
    is_email_public: bool | None = None
    cta_text: str | None = Field(default=None, max_length=255)
    custom_links: list[CustomLink] | None = None
    tags: list[str] | None = None


class CompanyResponse(CompanyBase):
    id: UUID
    name: str
    slug: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class CompanyList(BaseModel):
    companies: list[CompanyResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1)
    total_pages: int = Field(default=0, ge=0)


class CompanyMemberCreate(BaseModel):
    user_id: UUID
    role: CompanyMemberRole = CompanyMemberRole.USER
    title: str | None = Field(default=None, max_length=255)
    is_public: bool = True


class CompanyMemberUpdate(BaseModel):
    role: CompanyMemberRole | None = None
    title: str | None = Field(default=None, max_length=255)
    is_public: bool | None = None


class CompanyMemberResponse(BaseModel):
    id: UUID
    company_id: UUID
    user_id: UUID
    role: CompanyMemberRole
    title: str | None = None
    is_public: bool = True
    added_by: UUID | None = None
    created_at: datetime | None = None
