# =============================================================================
# core/models/user.py - User Account Schemas
# =============================================================================
# These models define the API contract for accounts:
# - UserRegister / UserLogin: credentials coming in
# - UserResponse: what a client may see about an account
# - UserProfileUpdate: self-service settings
# - AdminUserUpdate: back-office changes (admin flag, manual premium)
#
# The hashed password never leaves the service layer; UserResponse has no
# field for it.
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class PremiumSource(str, Enum):
    """
    Where a user's premium access comes from.

    - stripe: paid subscription
    - luma: granted by holding a qualifying event ticket
    - manual: granted by an admin
    """
    STRIPE = "stripe"
    LUMA = "luma"
    MANUAL = "manual"


class CustomLink(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    url: str = Field(..., min_length=1, max_length=500)


class UserRegister(BaseModel):
    """
    Registration payload.

    Example:
        {"email": "jane@example.com", "password": "correct horse", "display_name": "Jane"}
    """
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    display_name: str | None = Field(default=None, max_length=255)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=128)


class UserResponse(BaseModel):
    """
    Account as returned by /auth/me and the admin user list.

    `has_premium` is computed from the subscription and grant fields at
    read time; it is not stored.
    """
    id: UUID
    email: str
    display_name: str | None = None
    is_verified: bool = False
    is_admin: bool = False
    person_id: UUID | None = None

    subscription_status: str | None = Field(
        default="inactive",
        description="Stripe subscription status (active, canceled, past_due, ...)"
    )
    premium_source: PremiumSource | None = None
    premium_expires_at: datetime | None = None
    has_premium: bool = False

    bio: str | None = None
    company_name: str | None = None
    featured_image_url: str | None = None
    phone_number: str | None = None
    is_phone_public: bool = False
    is_email_public: bool = False
    cta_text: str | None = None
    custom_links: list[CustomLink] = Field(default_factory=list)

    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserProfileUpdate(BaseModel):
    """Fields a user may change on their own account. Omitted fields are left alone."""
    display_name: str | None = Field(default=None, max_length=255)
    bio: str | None = None
    company_name: str | None = Field(default=None, max_length=255)
    featured_image_url: str | None = Field(default=None, max_length=500)
    phone_number: str | None = Field(default=None, max_length=50)
    is_phone_public: bool | None = None
    is_email_public: bool | None = None
    cta_text: str | None = Field(default=None, max_length=255)
    custom_links: list[CustomLink] | None = None


class AdminUserUpdate(BaseModel):
    """
    Back-office account changes.

    Setting `premium_expires_at` grants manual premium until that time;
    `revoke_premium` clears a manual or Luma grant. Stripe subscriptions
    are only changed through Stripe.
    """
    is_admin: bool | None = None
    is_verified: bool | None = None
    premium_expires_at: datetime | None = None
    revoke_premium: bool = False


class UserList(BaseModel):
    users: list[UserResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    total_pages: int = Field(default=0, ge=0)
