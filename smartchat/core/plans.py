"""
smartchat/core/plans.py
────────────────────────
Paid SmartChat plans and the Stripe price allow-list.

Price IDs come from STRIPE_PRICE_STARTER / STRIPE_PRICE_PROFESSIONAL and
map 1:1 to the recurring prices in the Stripe dashboard. Checkout accepts
only these IDs.
"""

from __future__ import annotations

from typing import Optional

from smartchat.core.config import settings


# ---------------------------------------------------------------------------
# Plan definitions
# ---------------------------------------------------------------------------

PLANS: dict[str, dict] = {
    "starter": {
        "name":          "Starter",
        "priceId":       settings.STRIPE_PRICE_STARTER,
        "price":         297,
        "features":      ["1,000 conversations/mo", "1 website", "Dashboard access", "Email support"],
        "conversations": "1,000",
        "websites":      "1",
    },
    "professional": {
        "name":          "Professional",
        "priceId":       settings.STRIPE_PRICE_PROFESSIONAL,
        "price":         397,
        "features":      ["5,000 conversations/mo", "3 websites", "Priority support", "Chat analytics"],
        "conversations": "5,000",
        "websites":      "3",
    },
}

PRICE_TO_PLAN: dict[str, str] = {plan["priceId"]: plan_id for plan_id, plan in PLANS.items()}


def is_valid_price_id(price_id: Optional[str]) -> bool:
    return bool(price_id) and price_id in PRICE_TO_PLAN


def get_plan_by_price_id(price_id: str) -> Optional[dict]:
    plan_id = PRICE_TO_PLAN.get(price_id)
    return PLANS[plan_id] if plan_id else None


def list_plans() -> list[dict]:
    return [{"id": plan_id, **plan} for plan_id, plan in PLANS.items()]
