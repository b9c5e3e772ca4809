# =============================================================================
# core/services/premium_service.py - Premium Access Rules
# =============================================================================
# A user has premium ("member") access when any of these holds:
# - their Stripe subscription status is "active"
# - they hold an unexpired grant (premium_source luma or manual)
# Admins are treated as premium everywhere access is checked.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.utils import parse_datetime, utcnow
from core.models.user import PremiumSource
from app.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)


def has_active_premium(user: dict[str, Any] | None, now: datetime | None = None) -> bool:
    """True if the user's subscription is active or a grant hasn't expired."""
    if not user:
        return False

    if user.get("subscription_status") == "active":
        return True

    expires_at = parse_datetime(user.get("premium_expires_at"))
    if user.get("premium_source") and expires_at:
        return expires_at > (now or utcnow())

    return False


def active_premium_source(user: dict[str, Any] | None, now: datetime | None = None) -> str | None:
    """The source currently granting premium, Stripe first."""
    if not user:
        return None
    if user.get("subscription_status") == "active":
        return PremiumSource.STRIPE.value
    if has_active_premium(user, now):
        return user.get("premium_source")
    return None


def can_view_members_content(user: dict[str, Any] | None) -> bool:
    """Premium check that lets admins through."""
    if not user:
        return False
    return bool(user.get("is_admin")) or has_active_premium(user)


def default_grant_expiry(event_start: datetime | str) -> datetime:
    """End of the calendar year the event takes place in."""
    start = parse_datetime(event_start)
    return datetime(start.year, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


class PremiumService:
    """Writes premium grants onto user rows."""

    @staticmethod
    def count_active(now: datetime | None = None) -> int:
        """Users with premium right now, from Stripe or an unexpired grant."""
        now = now or utcnow()
        client = SupabaseClient.get_client()
        subscribed = client.table("users").select("*").eq("subscription_status", "active").execute().data or []
        granted = (
            client.table("users")
            .select("*")
            .gt("premium_expires_at", now.isoformat())
            .execute()
            .data
            or []
        )
        return len({u["id"] for u in subscribed + granted if has_active_premium(u, now)})

    @staticmethod
    def grant(
        user_id: str,
        source: PremiumSource,
        expires_at: datetime,
        granted_by: str | None = None,
    ) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        update = {
            "premium_source": source.value,
            "premium_expires_at": expires_at.isoformat(),
            "premium_granted_at": utcnow().isoformat(),
            "premium_granted_by": granted_by,
        }
        response = client.table("users").update(update).eq("id", user_id).execute()
        if not response.data:
            raise UserNotFoundError(user_id)

        logger.info(f"Granted {source.value} premium to user {user_id} until {expires_at.isoformat()}")
        return response.data[0]

    @staticmethod
    def revoke(user_id: str) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        update = {
            "premium_source": None,
            "premium_expires_at": None,
            "premium_granted_at": None,
            "premium_granted_by": None,
        }
        response = client.table("users").update(update).eq("id", user_id).execute()
        if not response.data:
            raise UserNotFoundError(user_id)

        logger.info(f"Revoked premium grant for user {user_id}")
        return response.data[0]

    @staticmethod
    def grant_from_ticket(
        user: dict[str, Any],
        expires_at: datetime,
    ) -> bool:
        """
        Grant Luma premium to a ticket holder.

        Paying subscribers are left alone. An existing Luma grant is only
        replaced when the new one lasts longer.

        Returns:
            True if the user row was updated
        """
        if user.get("subscription_status") == "active":
            return False

        current_expiry = parse_datetime(user.get("premium_expires_at"))
        has_live_luma_grant = (
            user.get("premium_source") == PremiumSource.LUMA.value
            and current_expiry is not None
            and current_expiry > utcnow()
        )
        if has_live_luma_grant and expires_at <= current_expiry:
            return False

        PremiumService.grant(str(user["id"]), PremiumSource.LUMA, expires_at)
        return True
