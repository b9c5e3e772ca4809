# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# The session token is read from the session cookie set by /auth/login;
# an "Authorization: Bearer <token>" header is accepted as a fallback for
# API clients.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError

from app.config import settings
from app.auth.models import AuthUser, TokenPayload
from lib.security import decode_session_token
from app.exceptions import AdminRequiredError, NotAuthenticatedError, PermissionDeniedError
from core.services.role_service import RoleService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)
bearer = HTTPBearer(auto_error=False)


def _extract_token(
    cookie_token: Optional[str],
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    if cookie_token:
        return cookie_token
    if credentials is not None:
        return credentials.credentials
    return None


def _user_from_token(token: str) -> AuthUser:
    try:
        payload = TokenPayload(**decode_session_token(token))
    except ExpiredSignatureError:
        logger.info("Session token has expired")
        raise NotAuthenticatedError("Session has expired")
    except JWTError as e:
        logger.warning(f"Session token validation failed: {e}")
        raise NotAuthenticatedError("Invalid session")

    try:
        user_id = UUID(payload.sub)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {payload.sub}")
        raise NotAuthenticatedError("Invalid session")

    return AuthUser(id=user_id, email=payload.email)


async def get_current_user(
    cookie_token: Optional[str] = Depends(session_cookie),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> AuthUser:
    """
    Extract and validate the user from the session token.

    Raises:
        NotAuthenticatedError: 401 if the token is missing, invalid or expired
    """
    token = _extract_token(cookie_token, credentials)
    if not token:
        raise NotAuthenticatedError()
    return _user_from_token(token)


async def get_current_user_optional(
    cookie_token: Optional[str] = Depends(session_cookie),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Optional[AuthUser]:
    """
    Optionally get the current user.

    Returns None if no token is provided or the token is invalid, instead
    of raising. Useful for public pages that show more to members.
    """
    token = _extract_token(cookie_token, credentials)
    if not token:
        return None
    try:
        return _user_from_token(token)
    except NotAuthenticatedError:
        return None


async def get_current_user_record(
    user: AuthUser = Depends(get_current_user),
) -> dict[str, Any]:
    """
    Load the authenticated user's row.

    A token for a deleted user is treated as logged out.
    """
    record = SupabaseClient.fetch_one("users", "id", str(user.id))
    if not record:
        raise NotAuthenticatedError("User no longer exists")
    return record


async def get_optional_user_record(
    user: Optional[AuthUser] = Depends(get_current_user_optional),
) -> Optional[dict[str, Any]]:
    if user is None:
        return None
    return SupabaseClient.fetch_one("users", "id", str(user.id))


async def require_admin(
    record: dict[str, Any] = Depends(get_current_user_record),
) -> dict[str, Any]:
    """
    Require a system admin.

    Raises:
        AdminRequiredError: 403 if the user isn't an admin
    """
    if not record.get("is_admin"):
        logger.warning(f"Non-admin user {record.get('id')} hit an admin route")
        raise AdminRequiredError()
    return record


def require_permission(permission: str):
    """
    Dependency factory: require a named permission through the user's roles.

    Admins pass without a role lookup.

    Usage:
        @router.post("", dependencies=[Depends(require_permission("publish_content"))])
    """
    async def checker(
        record: dict[str, Any] = Depends(get_current_user_record),
    ) -> dict[str, Any]:
        if record.get("is_admin"):
            return record

        if permission not in RoleService.get_user_permission_names(str(record["id"])):
            raise PermissionDeniedError(permission)
        return record

    return checker
