# =============================================================================
# app/routers/billing.py - Stripe Membership Endpoints
# =============================================================================
# Checkout and subscription management for the logged-in user, plus the
# Stripe webhook. The webhook is authenticated by its signature, not by a
# session.
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, Query, Request

from app.auth import get_current_user_record
from core.services.billing_service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-checkout-session")
async def create_checkout_session(record: dict[str, Any] = Depends(get_current_user_record)):
    """
    Start a subscription checkout.

    Returns the hosted checkout url to redirect the browser to.
    """
    return BillingService.create_checkout_session(record)


@router.get("/session-status")
async def get_session_status(
    session_id: Annotated[str, Query(min_length=1)],
    _: dict[str, Any] = Depends(get_current_user_record),
):
    """Poll after the checkout redirect: "complete" once paid, else "pending"."""
    return BillingService.get_session_status(session_id)


@router.get("/subscription-status")
async def get_subscription_status(record: dict[str, Any] = Depends(get_current_user_record)):
    return BillingService.get_subscription_status(record)


@router.post("/cancel-subscription")
async def cancel_subscription(record: dict[str, Any] = Depends(get_current_user_record)):
    return BillingService.cancel_subscription(record)


@router.post("/portal-session")
async def create_portal_session(record: dict[str, Any] = Depends(get_current_user_record)):
    """Link to Stripe's billing portal for payment methods and invoices."""
    return BillingService.create_portal_session(record)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
):
    """
    Receive Stripe events.

    The raw body is needed for signature verification.
    """
    payload = await request.body()
    return BillingService.handle_webhook(payload, stripe_signature)
