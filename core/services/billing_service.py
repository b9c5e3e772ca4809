# =============================================================================
# core/services/billing_service.py - Membership Billing
# =============================================================================
# Stripe checkout, subscription status and webhook handling.
#
# The users table mirrors three Stripe fields: stripe_customer_id,
# subscription_id and subscription_status. Webhooks and session-status
# polling both write through update_subscription_by_customer, so whichever
# arrives first wins and the other is a no-op rewrite.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient
from lib.stripe_client import StripeClient
from app.config import settings
from app.exceptions import BillingError

logger = logging.getLogger(__name__)

HANDLED_WEBHOOK_EVENTS = {
    "checkout.session.completed",
    "customer.subscription.updated",
    "customer.subscription.deleted",
}


def _field(obj: Any, name: str) -> Any:
    """Read a field from a Stripe object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _id_of(value: Any) -> str | None:
    """Stripe references are either an id string or an expanded object."""
    if value is None or isinstance(value, str):
        return value
    return _field(value, "id")


class BillingService:
    """Service for the membership subscription."""

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    @staticmethod
    def ensure_customer(user: dict[str, Any]) -> str:
        """Return the user's Stripe customer id, creating the customer on first use."""
        if user.get("stripe_customer_id"):
            return user["stripe_customer_id"]

        customer_id = StripeClient.create_customer(user["email"], str(user["id"]))
        client = SupabaseClient.get_client()
        client.table("users").update({"stripe_customer_id": customer_id}).eq("id", str(user["id"])).execute()
        return customer_id

    @staticmethod
    def create_checkout_session(user: dict[str, Any]) -> dict[str, Any]:
        customer_id = BillingService.ensure_customer(user)
        app_url = settings.APP_URL.rstrip("/")
        session = StripeClient.create_checkout_session(
            customer_id=customer_id,
            success_url=f"{app_url}/subscription/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{app_url}/subscription/cancel",
        )
        logger.info(f"Created checkout session {_field(session, 'id')} for user {user['id']}")
        return {"session_id": _field(session, "id"), "url": _field(session, "url")}

    @staticmethod
    def get_session_status(session_id: str) -> dict[str, Any]:
        """
        Poll a checkout session after redirect.

        Returns "complete" once the payment is confirmed, "pending" otherwise,
        and records the subscription on the user as a side effect.
        """
        session = StripeClient.retrieve_checkout_session(session_id)
        subscription = _field(session, "subscription")
        customer_id = _id_of(_field(session, "customer"))

        if subscription is not None and not isinstance(subscription, str) and customer_id:
            BillingService.update_subscription_by_customer(
                customer_id,
                _field(subscription, "id"),
                _field(subscription, "status"),
            )

        payment_status = _field(session, "payment_status")
        return {
            "status": "complete" if payment_status == "paid" else "pending",
            "session_status": _field(session, "status"),
            "payment_status": payment_status,
        }

    # -------------------------------------------------------------------------
    # Subscription Management
    # -------------------------------------------------------------------------

    @staticmethod
    def cancel_subscription(user: dict[str, Any]) -> dict[str, Any]:
        """
        Raises:
            BillingError: If the user has no subscription on file
        """
        subscription_id = user.get("subscription_id")
        if not subscription_id:
            raise BillingError("No active subscription found")

        cancelled = StripeClient.cancel_subscription(subscription_id)
        status = _field(cancelled, "status")
        client = SupabaseClient.get_client()
        client.table("users").update({"subscription_status": status}).eq("id", str(user["id"])).execute()

        logger.info(f"Cancelled subscription {subscription_id} for user {user['id']}")
        return {"status": "success", "subscription_status": status}

    @staticmethod
    def create_portal_session(user: dict[str, Any]) -> dict[str, Any]:
        customer_id = user.get("stripe_customer_id")
        if not customer_id:
            raise BillingError("No customer record found", suggestion="Start a subscription first")

        portal = StripeClient.create_portal_session(customer_id, return_url=f"{settings.APP_URL.rstrip('/')}/settings")
        return {"url": _field(portal, "url")}

    @staticmethod
    def get_subscription_status(user: dict[str, Any]) -> dict[str, Any]:
        """
        Current status straight from Stripe.

        Admins always report active; users without a customer are inactive.
        """
        if user.get("is_admin"):
            return {"status": "active"}
        customer_id = user.get("stripe_customer_id")
        if not customer_id:
            return {"status": "inactive"}

        subscription = StripeClient.latest_subscription(customer_id)
        if subscription is None:
            return {"status": "inactive"}

        status = _field(subscription, "status")
        if status != user.get("subscription_status"):
            BillingService.update_subscription_by_customer(customer_id, _field(subscription, "id"), status)
        return {"status": status, "subscription_id": _field(subscription, "id")}

    @staticmethod
    def update_subscription_by_customer(
        customer_id: str,
        subscription_id: str | None,
        status: str | None,
    ) -> dict[str, Any] | None:
        """Write subscription fields onto the user owning this customer id."""
        user = SupabaseClient.fetch_one("users", "stripe_customer_id", customer_id)
        if not user:
            logger.warning(f"No user for Stripe customer {customer_id}")
            return None

        client = SupabaseClient.get_client()
        response = (
            client.table("users")
            .update({"subscription_id": subscription_id, "subscription_status": status})
            .eq("id", str(user["id"]))
            .execute()
        )
        logger.info(f"Subscription for user {user['id']} is now {status}")
        return response.data[0] if response.data else None

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    @staticmethod
    def handle_webhook(payload: bytes, signature: str | None) -> dict[str, Any]:
        """
        Verify and apply a Stripe webhook.

        Returns:
            {"received": True, "type": <event type>, "handled": bool}
        """
        event = StripeClient.construct_webhook_event(payload, signature)
        event_type = _field(event, "type")
        obj = _field(_field(event, "data"), "object")
        logger.info(f"Stripe webhook: {event_type}")

        if event_type not in HANDLED_WEBHOOK_EVENTS:
            return {"received": True, "type": event_type, "handled": False}

        if event_type == "checkout.session.completed":
            customer_id = _id_of(_field(obj, "customer"))
            subscription_id = _id_of(_field(obj, "subscription"))
            if customer_id and subscription_id:
                subscription = StripeClient.retrieve_subscription(subscription_id)
                BillingService.update_subscription_by_customer(
                    customer_id, subscription_id, _field(subscription, "status")
                )
        else:
            BillingService.update_subscription_by_customer(
                _id_of(_field(obj, "customer")),
                _field(obj, "id"),
                _field(obj, "status"),
            )

        return {"received": True, "type": event_type, "handled": True}
