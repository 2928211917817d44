"""
smartchat/api/endpoints/billing.py
───────────────────────────────────
Stripe checkout, subscription status, billing portal and plan listing.

Routes:
  POST /stripe/checkout      Create Stripe Checkout session for an allow-listed price
  GET  /stripe/subscription  Active subscription for an email (service-role read)
  POST /stripe/portal        Create Stripe Customer Portal session
  GET  /stripe/plans         Configured paid plans
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from smartchat.core.deps import (
    get_stripe_service,
    get_subscription_repository,
    get_user_repository,
)
from smartchat.core.errors import BadRequestError, NotFoundError, UpstreamError
from smartchat.core.plans import get_plan_by_price_id, is_valid_price_id, list_plans
from smartchat.repositories.repositories import SubscriptionRepository, UserRepository
from smartchat.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    PlanOut,
    PortalRequest,
    PortalResponse,
    SubscriptionStatusResponse,
    SubscriptionSummary,
)
from smartchat.services.stripe_service import StripeService

log = logging.getLogger(__name__)

router = APIRouter(prefix="/stripe", tags=["Billing"])

NO_SUBSCRIPTION = SubscriptionStatusResponse(has_subscription=False, subscription=None)


# ─────────────────────────────────────────────────────────────────────────
# Checkout: create Stripe session
# ─────────────────────────────────────────────────────────────────────────

@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    payload: CheckoutRequest,
    stripe: StripeService = Depends(get_stripe_service),
):
    """
    Creates a Stripe Checkout session for one of the configured plan prices.

    Returns `sessionId` and `url`; the frontend redirects the user to `url`.
    """
    if not is_valid_price_id(payload.price_id):
        log.warning(f"[Checkout] Rejected price id: {payload.price_id!r}")
        raise BadRequestError("Invalid price ID")

    plan = get_plan_by_price_id(payload.price_id)
    log.info(f"[Checkout] Starting {plan['name']} checkout (user={payload.user_id or '-'})")

    result = await stripe.create_checkout_session(
        price_id=payload.price_id,
        customer_email=payload.email,
        user_id=payload.user_id,
        success_url=payload.success_url,
        cancel_url=payload.cancel_url,
    )

    if not result["ok"]:
        log.error(f"[Checkout] Stripe error: {result.get('error')}")
        raise UpstreamError("Failed to create checkout session")

    return CheckoutResponse(session_id=result["session_id"], url=result["checkout_url"])


# ─────────────────────────────────────────────────────────────────────────
# Subscription status
# ─────────────────────────────────────────────────────────────────────────

@router.get("/subscription", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    email: Optional[str] = None,
    users: UserRepository = Depends(get_user_repository),
    subscriptions: SubscriptionRepository = Depends(get_subscription_repository),
):
    """
    Looks up the newest active / trialing / past_due subscription for `email`.
    An unknown email is a normal "no subscription" answer, not an error.
    """
    if not email:
        raise BadRequestError("Email is required")

    try:
        user_id = await users.get_id_by_email(email)
        if not user_id:
            return NO_SUBSCRIPTION

        row = await subscriptions.get_latest_active(user_id)
    except Exception as e:
        log.error(f"[Subscription] Lookup failed: {e}", exc_info=True)
        raise UpstreamError("Failed to fetch subscription")

    if not row:
        return NO_SUBSCRIPTION

    return SubscriptionStatusResponse(
        has_subscription=True,
        subscription=SubscriptionSummary(
            plan=row.get("plan"),
            status=row["status"],
            current_period_end=row.get("current_period_end"),
            cancel_at_period_end=row.get("cancel_at_period_end"),
        ),
    )


# ─────────────────────────────────────────────────────────────────────────
# Billing portal
# ─────────────────────────────────────────────────────────────────────────

@router.post("/portal", response_model=PortalResponse)
async def create_portal(
    payload: PortalRequest,
    users: UserRepository = Depends(get_user_repository),
    stripe: StripeService = Depends(get_stripe_service),
):
    """Opens the Stripe Customer Portal for the billing account behind `email`."""
    if not payload.email:
        raise BadRequestError("Email is required")

    try:
        customer_id = await users.get_stripe_customer_id(payload.email)
    except Exception as e:
        log.error(f"[Portal] Customer lookup failed: {e}", exc_info=True)
        raise UpstreamError("Failed to create portal session")

    if not customer_id:
        raise NotFoundError("No billing account found")

    result = await stripe.create_portal_session(customer_id, return_url=payload.return_url)
    if not result["ok"] or not result.get("portal_url"):
        log.error(f"[Portal] Stripe error: {result.get('error')}")
        raise UpstreamError("Failed to create portal session")

    return PortalResponse(url=result["portal_url"])


# ─────────────────────────────────────────────────────────────────────────
# Plans
# ─────────────────────────────────────────────────────────────────────────

@router.get("/plans", response_model=list[PlanOut])
async def get_plans():
    return [PlanOut.model_validate(plan) for plan in list_plans()]
