# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Cookie-based session authentication.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import (
    get_current_user,
    get_current_user_optional,
    get_current_user_record,
    get_optional_user_record,
    require_admin,
    require_permission,
)
from app.auth.models import AuthUser

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "get_current_user_record",
    "get_optional_user_record",
    "require_admin",
    "require_permission",
    "AuthUser",
]
