# =============================================================================
# core/services/user_service.py - Account Business Logic
# =============================================================================
# Registration, email verification, login, password reset, self-service
# profile updates and the admin user list.
#
# Emails are stored lowercased. A user is linked to the directory person
# with the same email when they verify (and again on login if the person
# was imported later).
# =============================================================================

import logging
from datetime import timedelta
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import page_range, parse_datetime, total_pages, utcnow, utcnow_iso
from lib import email_client
from core.models.user import (
    AdminUserUpdate,
    PremiumSource,
    UserProfileUpdate,
    UserRegister,
)
from core.services.premium_service import PremiumService, has_active_premium
from lib.security import (
    generate_opaque_token,
    hash_password,
    verify_password,
)
from app.config import settings
from app.exceptions import (
    DuplicateError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidTokenError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

TOKEN_TYPE_VERIFICATION = "verification"
TOKEN_TYPE_PASSWORD_RESET = "password_reset"

# Columns never sent to clients
PRIVATE_USER_FIELDS = {"password", "premium_granted_by", "stripe_customer_id", "subscription_id"}


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    """User row without credentials or billing ids, plus computed has_premium."""
    data = {k: v for k, v in user.items() if k not in PRIVATE_USER_FIELDS}
    data["has_premium"] = bool(user.get("is_admin")) or has_active_premium(user)
    data["custom_links"] = user.get("custom_links") or []
    return data


class UserService:
    """
    Service for account operations.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @staticmethod
    def get_user(user_id: str) -> dict[str, Any]:
        """
        Raises:
            UserNotFoundError: If no such user
        """
        user = SupabaseClient.fetch_one("users", "id", str(user_id))
        if not user:
            raise UserNotFoundError(str(user_id))
        return user

    @staticmethod
    def get_user_by_email(email: str) -> dict[str, Any] | None:
        return SupabaseClient.fetch_one("users", "email", email.strip().lower())

    # -------------------------------------------------------------------------
    # Registration & Verification
    # -------------------------------------------------------------------------

    @staticmethod
    def register(data: UserRegister) -> dict[str, Any]:
        """
        Create an unverified account and email a verification link.

        Registering again with an email that was never verified replaces
        the password and sends a fresh link.

        Raises:
            DuplicateError: If a verified account already uses the email
        """
        client = SupabaseClient.get_client()
        email = data.email.strip().lower()
        existing = UserService.get_user_by_email(email)

        fields = {
            "email": email,
            "password": hash_password(data.password),
            "display_name": data.display_name,
        }

        if existing:
            if existing.get("is_verified"):
                raise DuplicateError("User", "email", email)
            response = client.table("users").update(fields).eq("id", existing["id"]).execute()
            user = response.data[0]
            logger.info(f"Re-registration for unverified user {user['id']}")
        else:
            response = (
                client.table("users")
                .insert({**fields, "is_verified": False, "is_admin": False, "subscription_status": "inactive"})
                .execute()
            )
            user = response.data[0]
            logger.info(f"Registered user {user['id']}")

        token = UserService._issue_token(str(user["id"]), TOKEN_TYPE_VERIFICATION)
        email_client.send_verification_email(email, token)
        return user

    @staticmethod
    def verify_email(token: str) -> dict[str, Any]:
        """
        Consume a verification token, mark the user verified and link
        their directory person.

        Raises:
            InvalidTokenError: Unknown, used or expired token
        """
        token_row = UserService._consume_token(token, TOKEN_TYPE_VERIFICATION)
        client = SupabaseClient.get_client()
        response = (
            client.table("users")
            .update({"is_verified": True})
            .eq("id", token_row["user_id"])
            .execute()
        )
        if not response.data:
            raise UserNotFoundError(str(token_row["user_id"]))

        user = UserService.link_person(response.data[0])
        logger.info(f"Verified user {user['id']}")
        return user

    @staticmethod
    def resend_verification(email: str) -> None:
        """Send a new link to an unverified account. Unknown emails are ignored."""
        user = UserService.get_user_by_email(email)
        if not user or user.get("is_verified"):
            return
        token = UserService._issue_token(str(user["id"]), TOKEN_TYPE_VERIFICATION)
        email_client.send_verification_email(user["email"], token)

    # -------------------------------------------------------------------------
    # Login & Password Reset
    # -------------------------------------------------------------------------

    @staticmethod
    def authenticate(email: str, password: str) -> dict[str, Any]:
        """
        Check credentials.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            EmailNotVerifiedError: Correct password, unverified email
        """
        user = UserService.get_user_by_email(email)
        if not user or not verify_password(password, user.get("password")):
            logger.info(f"Failed login for {email.strip().lower()}")
            raise InvalidCredentialsError()

        if not user.get("is_verified"):
            raise EmailNotVerifiedError(user["email"])

        if not user.get("person_id"):
            user = UserService.link_person(user)
        return user

    @staticmethod
    def request_password_reset(email: str) -> None:
        """Email a reset link. Unknown emails are ignored so accounts can't be probed."""
        user = UserService.get_user_by_email(email)
        if not user:
            logger.info("Password reset requested for unknown email")
            return
        token = UserService._issue_token(str(user["id"]), TOKEN_TYPE_PASSWORD_RESET)
        email_client.send_password_reset_email(user["email"], token)

    @staticmethod
    def reset_password(token: str, new_password: str) -> dict[str, Any]:
        """
        Consume a reset token and set the new password.

        Following a reset link proves ownership of the address, so the
        account is marked verified too.
        """
        token_row = UserService._consume_token(token, TOKEN_TYPE_PASSWORD_RESET)
        client = SupabaseClient.get_client()
        response = (
            client.table("users")
            .update({"password": hash_password(new_password), "is_verified": True})
            .eq("id", token_row["user_id"])
            .execute()
        )
        if not response.data:
            raise UserNotFoundError(str(token_row["user_id"]))
        logger.info(f"Password reset for user {token_row['user_id']}")
        return response.data[0]

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    @staticmethod
    def _issue_token(user_id: str, token_type: str) -> str:
        client = SupabaseClient.get_client()
        token = generate_opaque_token()
        expires_at = utcnow() + timedelta(hours=settings.VERIFICATION_TOKEN_TTL_HOURS)
        client.table("verification_tokens").insert({
            "user_id": user_id,
            "token": token,
            "type": token_type,
            "expires_at": expires_at.isoformat(),
        }).execute()
        return token

    @staticmethod
    def _consume_token(token: str, token_type: str) -> dict[str, Any]:
        row = SupabaseClient.fetch_one("verification_tokens", "token", token)
        if not row or row.get("type") != token_type:
            raise InvalidTokenError()
        if row.get("used_at"):
            raise InvalidTokenError("This link has already been used")
        expires_at = parse_datetime(row.get("expires_at"))
        if expires_at is None or expires_at <= utcnow():
            raise InvalidTokenError("This link has expired")

        client = SupabaseClient.get_client()
        client.table("verification_tokens").update({"used_at": utcnow_iso()}).eq("id", row["id"]).execute()
        return row

    # -------------------------------------------------------------------------
    # Person Link
    # -------------------------------------------------------------------------

    @staticmethod
    def link_person(user: dict[str, Any]) -> dict[str, Any]:
        """Attach the directory person with the same email, if one exists."""
        person = SupabaseClient.fetch_one("people", "email", user["email"])
        if not person or user.get("person_id") == person["id"]:
            return user

        client = SupabaseClient.get_client()
        response = client.table("users").update({"person_id": person["id"]}).eq("id", user["id"]).execute()
        logger.info(f"Linked user {user['id']} to person {person['api_id']}")
        return response.data[0] if response.data else {**user, "person_id": person["id"]}

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    @staticmethod
    def update_profile(user_id: str, data: UserProfileUpdate) -> dict[str, Any]:
        user = UserService.get_user(user_id)
        update_data = data.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return user

        client = SupabaseClient.get_client()
        response = client.table("users").update(update_data).eq("id", str(user_id)).execute()
        logger.info(f"Updated profile for user {user_id}: {sorted(update_data)}")
        return response.data[0] if response.data else user

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    @staticmethod
    def list_users(page: int = 1, limit: int = 20, search: str | None = None) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        query = client.table("users").select("*", count="exact")
        if search:
            term = search.strip().replace(",", " ")
            query = query.or_(f"email.ilike.%{term}%,display_name.ilike.%{term}%")

        start, end = page_range(page, limit)
        response = query.order("created_at", desc=True).range(start, end).execute()
        total = response.count or 0

        return {
            "users": [public_user(u) for u in response.data or []],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages(total, limit),
        }

    @staticmethod
    def admin_update(user_id: str, data: AdminUserUpdate, admin_id: str) -> dict[str, Any]:
        """Apply admin flag changes and manual premium grants/revocations."""
        user = UserService.get_user(user_id)
        client = SupabaseClient.get_client()

        flags = data.model_dump(include={"is_admin", "is_verified"}, exclude_none=True)
        if flags:
            response = client.table("users").update(flags).eq("id", str(user_id)).execute()
            user = response.data[0] if response.data else user
            logger.info(f"Admin {admin_id} set {flags} on user {user_id}")

        if data.revoke_premium:
            user = PremiumService.revoke(str(user_id))
        elif data.premium_expires_at is not None:
            user = PremiumService.grant(
                str(user_id),
                PremiumSource.MANUAL,
                data.premium_expires_at,
                granted_by=str(admin_id),
            )

        return user
