# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Registration, email verification, login/logout and the current user's
# own profile.
#
# Login sets an httponly session cookie holding a signed JWT; every other
# route reads it through app.auth.dependencies.
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter, Depends, Response, status

from app.auth.dependencies import get_current_user_record
from app.config import settings
from core.models.user import (
    PasswordResetConfirm,
    PasswordResetRequest,
    UserLogin,
    UserProfileUpdate,
    UserRegister,
    UserResponse,
    VerifyEmailRequest,
)
from core.services.company_service import CompanyService
from core.services.role_service import RoleService
from core.services.user_service import UserService, public_user
from lib.security import create_session_token

logger = logging.getLogger(__name__)

router = APIRouter()

# Same answer whether or not the email exists
RESET_SENT_MESSAGE = "If an account exists for that email, a link is on its way"


def _set_session_cookie(response: Response, user: dict[str, Any]) -> None:
    token = create_session_token(str(user["id"]), user["email"], bool(user.get("is_admin")))
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_HOURS * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


# =============================================================================
# Registration & Verification
# =============================================================================

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(request: UserRegister):
    """
    Create an account.

    The account can't log in until the emailed verification link is used.
    """
    user = UserService.register(request)
    return {
        "message": "Check your email to verify your account",
        "user": UserResponse(**public_user(user)),
    }


@router.post("/verify-email", response_model=UserResponse)
async def verify_email(request: VerifyEmailRequest, response: Response):
    """Verify an email address and log the user in."""
    user = UserService.verify_email(request.token)
    _set_session_cookie(response, user)
    return UserResponse(**public_user(user))


@router.post("/resend-verification")
async def resend_verification(request: PasswordResetRequest):
    UserService.resend_verification(request.email)
    return {"message": "If the account is awaiting verification, a new link is on its way"}


# =============================================================================
# Session
# =============================================================================

@router.post("/login", response_model=UserResponse)
async def login(request: UserLogin, response: Response):
    """
    Log in with email and password.

    Raises:
        401: Wrong email or password
        403: Email not verified yet
    """
    user = UserService.authenticate(request.email, request.password)
    _set_session_cookie(response, user)
    return UserResponse(**public_user(user))


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME, samesite="lax")
    return {"message": "Logged out"}


# =============================================================================
# Password Reset
# =============================================================================

@router.post("/reset-password/request")
async def request_password_reset(request: PasswordResetRequest):
    UserService.request_password_reset(request.email)
    return {"message": RESET_SENT_MESSAGE}


@router.post("/reset-password/confirm")
async def confirm_password_reset(request: PasswordResetConfirm):
    UserService.reset_password(request.token, request.password)
    return {"message": "Password updated, you can now log in"}


# =============================================================================
# Current User
# =============================================================================

@router.get("/me", response_model=UserResponse)
async def get_me(record: dict[str, Any] = Depends(get_current_user_record)):
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
    """
    return UserResponse(**public_user(record))


@router.patch("/me", response_model=UserResponse)
async def update_me(
    request: UserProfileUpdate,
    record: dict[str, Any] = Depends(get_current_user_record),
):
    user = UserService.update_profile(str(record["id"]), request)
    return UserResponse(**public_user(user))


@router.get("/me/permissions")
async def get_my_permissions(record: dict[str, Any] = Depends(get_current_user_record)):
    """Permission names granted through the user's roles."""
    names = RoleService.get_user_permission_names(str(record["id"]))
    return {
        "is_admin": bool(record.get("is_admin")),
        "roles": [role["name"] for role in RoleService.get_user_roles(str(record["id"]))],
        "permissions": sorted(names),
    }


@router.get("/me/companies")
async def get_my_companies(record: dict[str, Any] = Depends(get_current_user_record)):
    return {"companies": CompanyService.companies_for_user(str(record["id"]))}
