# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel
from uuid import UUID
from typing import Optional


class AuthUser(BaseModel):
    """
    Authenticated user extracted from the session token.

    This is the minimal user info carried by the token itself; routes that
    need current flags (admin, premium) load the row through
    get_current_user_record.
    """
    id: UUID
    email: Optional[str] = None

    model_config = {"frozen": True}


class TokenPayload(BaseModel):
    """Decoded session token payload."""
    sub: str  # User ID
    email: Optional[str] = None
    aud: str
    exp: int
    iat: int
    adm: bool = False
