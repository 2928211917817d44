"""
smartchat/schemas/billing.py
─────────────────────────────
Pydantic schemas for the Stripe billing endpoints.

Wire format is camelCase (priceId, sessionId, currentPeriodEnd, …);
Python attributes stay snake_case.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Stripe Checkout ───────────────────────────────────────────────────────

class CheckoutRequest(CamelModel):
    # Optional here so a missing priceId is a 400, not a validation error
    price_id: Optional[str] = None
    email: Optional[str] = None
    user_id: Optional[str] = None
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None

    @field_validator("price_id", mode="before")
    @classmethod
    def coerce_price_id(cls, v):
        # Non-string ids fall through to the allow-list check and fail there
        if v is None or isinstance(v, str):
            return v
        return str(v)


class CheckoutResponse(CamelModel):
    session_id: str
    url: str


# ── Subscription status ───────────────────────────────────────────────────

class SubscriptionSummary(CamelModel):
    plan: Optional[str] = None
    status: str
    current_period_end: Optional[str] = None
    cancel_at_period_end: Optional[bool] = None


class SubscriptionStatusResponse(CamelModel):
    has_subscription: bool
    subscription: Optional[SubscriptionSummary] = None


# ── Billing portal ────────────────────────────────────────────────────────

class PortalRequest(CamelModel):
    email: Optional[str] = None
    return_url: Optional[str] = None


class PortalResponse(BaseModel):
    url: str


# ── Plans ─────────────────────────────────────────────────────────────────

class PlanOut(CamelModel):
    id: str
    name: str
    price_id: str
    price: int
    features: list[str]
    conversations: str
    websites: str
