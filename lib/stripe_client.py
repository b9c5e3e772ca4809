# =============================================================================
# lib/stripe_client.py - Stripe SDK Wrapper
# =============================================================================
# Wraps the official stripe SDK calls used for membership billing:
# - customers and checkout sessions
# - subscription lookup and cancellation
# - billing portal sessions
# - webhook signature verification
#
# Every SDK error is converted to ExternalServiceError carrying Stripe's
# HTTP status so routes forward it unchanged.
#
# Usage:
#   from lib.stripe_client import StripeClient
#   session = StripeClient.create_checkout_session(customer_id, success, cancel)
# =============================================================================

import logging
from typing import Any

import stripe

from app.config import settings
from app.exceptions import ExternalServiceError, ServiceNotConfiguredError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Stripe"


def _wrap_stripe_error(action: str, error: "stripe.StripeError") -> ExternalServiceError:
    message = getattr(error, "user_message", None) or str(error)
    logger.error(f"Stripe {action} failed: {message}")
    return ExternalServiceError(
        SERVICE_NAME,
        message,
        upstream_status=getattr(error, "http_status", None),
    )


class StripeClient:
    """
    Class-level wrapper around the stripe module.

    The API key is applied lazily so the app starts without Stripe
    credentials; billing routes then answer 503.
    """

    @classmethod
    def _configure(cls) -> None:
        if not settings.STRIPE_SECRET_KEY:
            raise ServiceNotConfiguredError(SERVICE_NAME, "STRIPE_SECRET_KEY")
        stripe.api_key = settings.STRIPE_SECRET_KEY

    # -------------------------------------------------------------------------
    # Customers & Checkout
    # -------------------------------------------------------------------------

    @classmethod
    def create_customer(cls, email: str, user_id: str) -> str:
        """Create a Stripe customer and return its id."""
        cls._configure()
        try:
            customer = stripe.Customer.create(email=email, metadata={"user_id": user_id})
        except stripe.StripeError as e:
            raise _wrap_stripe_error("customer creation", e)
        logger.info(f"Created Stripe customer {customer.id} for user {user_id}")
        return customer.id

    @classmethod
    def create_checkout_session(
        cls,
        customer_id: str,
        success_url: str,
        cancel_url: str,
    ) -> Any:
        """Create a subscription-mode checkout session for the membership price."""
        cls._configure()
        if not settings.STRIPE_PRICE_ID:
            raise ServiceNotConfiguredError(SERVICE_NAME, "STRIPE_PRICE_ID")

        try:
            return stripe.checkout.Session.create(
                customer=customer_id,
                mode="subscription",
                line_items=[{"price": settings.STRIPE_PRICE_ID, "quantity": 1}],
                success_url=success_url,
                cancel_url=cancel_url,
                allow_promotion_codes=True,
            )
        except stripe.StripeError as e:
            raise _wrap_stripe_error("checkout session creation", e)

    @classmethod
    def retrieve_checkout_session(cls, session_id: str) -> Any:
        """Fetch a checkout session with its subscription expanded."""
        cls._configure()
        try:
            return stripe.checkout.Session.retrieve(session_id, expand=["subscription"])
        except stripe.StripeError as e:
            raise _wrap_stripe_error("checkout session lookup", e)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    @classmethod
    def retrieve_subscription(cls, subscription_id: str) -> Any:
        cls._configure()
        try:
            return stripe.Subscription.retrieve(subscription_id)
        except stripe.StripeError as e:
            raise _wrap_stripe_error("subscription lookup", e)

    @classmethod
    def latest_subscription(cls, customer_id: str) -> Any | None:
        """Most recent subscription of a customer, in any status."""
        cls._configure()
        try:
            result = stripe.Subscription.list(customer=customer_id, status="all", limit=1)
        except stripe.InvalidRequestError as e:
            # Deleted customers answer 404; treat as "no subscription".
            if getattr(e, "http_status", None) == 404:
                logger.info(f"Stripe customer {customer_id} not found")
                return None
            raise _wrap_stripe_error("subscription list", e)
        except stripe.StripeError as e:
            raise _wrap_stripe_error("subscription list", e)

        return result.data[0] if result.data else None

    @classmethod
    def cancel_subscription(cls, subscription_id: str) -> Any:
        cls._configure()
        try:
            return stripe.Subscription.cancel(subscription_id)
        except stripe.StripeError as e:
            raise _wrap_stripe_error("subscription cancellation", e)

    # -------------------------------------------------------------------------
    # Billing Portal
    # -------------------------------------------------------------------------

    @classmethod
    def create_portal_session(cls, customer_id: str, return_url: str) -> Any:
        cls._configure()
        try:
            return stripe.billing_portal.Session.create(customer=customer_id, return_url=return_url)
        except stripe.StripeError as e:
            raise _wrap_stripe_error("portal session creation", e)

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    @classmethod
    def construct_webhook_event(cls, payload: bytes, signature: str | None) -> Any:
        """
        Verify a webhook payload against STRIPE_WEBHOOK_SECRET.

        Raises:
            ExternalServiceError: 400 when the signature or payload is invalid
        """
        if not settings.STRIPE_WEBHOOK_SECRET:
            raise ServiceNotConfiguredError(SERVICE_NAME, "STRIPE_WEBHOOK_SECRET")
        try:
            return stripe.Webhook.construct_event(payload, signature or "", settings.STRIPE_WEBHOOK_SECRET)
        except (stripe.SignatureVerificationError, ValueError) as e:
            logger.warning(f"Rejected Stripe webhook: {e}")
            raise ExternalServiceError(SERVICE_NAME, f"Webhook verification failed: {e}", upstream_status=400)
