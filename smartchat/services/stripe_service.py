"""
smartchat/services/stripe_service.py
─────────────────────────────────────
Stripe Checkout + Billing Portal integration.

Flow:
  1. Pricing page hits POST /api/stripe/checkout → we create a Checkout session
  2. User is redirected to Stripe's hosted checkout page
  3. Stripe redirects back to success_url / cancel_url
  4. Subscribers manage billing through POST /api/stripe/portal

Calls go straight to the Stripe REST API (form-encoded) over httpx; one
short-lived AsyncClient per call, no retries.

Configuration required in .env:
  STRIPE_SECRET_KEY=sk_live_...
  STRIPE_PRICE_STARTER=price_...
  STRIPE_PRICE_PROFESSIONAL=price_...
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from smartchat.core.config import settings

log = logging.getLogger(__name__)

STRIPE_API_BASE = "https://api.stripe.com/v1"


class StripeService:

    def __init__(
        self,
        secret_key: Optional[str] = None,
        app_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self.app_url = (app_url or settings.APP_BASE_URL).rstrip("/")
        self.enabled = bool(self.secret_key)
        self._transport = transport

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/x-www-form-urlencoded",
        }

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def default_success_url(self) -> str:
        # {CHECKOUT_SESSION_ID} is substituted by Stripe on redirect
        return f"{self.app_url}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}"

    def default_cancel_url(self) -> str:
        return f"{self.app_url}/checkout/cancel"

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            return resp.json().get("error", {}).get("message", resp.text)
        except ValueError:
            return resp.text

    async def create_checkout_session(
        self,
        price_id: str,
        customer_email: Optional[str] = None,
        user_id: Optional[str] = None,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> dict:
        """
        Creates a subscription-mode Checkout session for one plan price.

        Returns {"ok": True, "session_id": "...", "checkout_url": "..."}
        or {"ok": False, "error": "..."} on failure.
        """
        if not self.enabled:
            log.error("[Stripe] STRIPE_SECRET_KEY not configured, cannot create checkout")
            return {"ok": False, "error": "Stripe is not configured"}

        params = {
            "mode": "subscription",
            "line_items[0][price]": price_id,
            "line_items[0][quantity]": "1",
            "allow_promotion_codes": "true",
            "billing_address_collection": "required",
            "success_url": success_url or self.default_success_url(),
            "cancel_url": cancel_url or self.default_cancel_url(),
            "metadata[userId]": user_id or "",
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            async with self._client(timeout=15.0) as client:
                resp = await client.post(
                    f"{STRIPE_API_BASE}/checkout/sessions",
                    headers=self._headers(),
                    data=params,
                )
                if resp.status_code in (200, 201):
                    data = resp.json()
                    if not data.get("url"):
                        log.error(f"[Stripe] Checkout session {data.get('id')} created without a URL")
                        return {"ok": False, "error": "No checkout URL generated"}
                    log.info(f"[Stripe] Checkout session created: {data['id']}")
                    return {
                        "ok": True,
                        "checkout_url": data["url"],
                        "session_id": data["id"],
                    }
                else:
                    log.error(f"[Stripe] Checkout creation failed {resp.status_code}: {resp.text}")
                    return {"ok": False, "error": self._error_message(resp)}
        except Exception as e:
            log.error(f"[Stripe] Exception creating checkout: {e}", exc_info=True)
            return {"ok": False, "error": str(e)}

    async def create_portal_session(self, customer_id: str, return_url: Optional[str] = None) -> dict:
        """
        Creates a Stripe Customer Portal session.
        Returns {"portal_url": "...", "ok": True} or {"ok": False, "error": "..."}
        """
        if not self.enabled:
            log.error("[Stripe] STRIPE_SECRET_KEY not configured, cannot create portal session")
            return {"ok": False, "error": "Stripe is not configured"}

        try:
            async with self._client(timeout=10.0) as client:
                resp = await client.post(
                    f"{STRIPE_API_BASE}/billing_portal/sessions",
                    headers=self._headers(),
                    data={
                        "customer": customer_id,
                        "return_url": return_url or f"{self.app_url}/dashboard",
                    },
                )
                if resp.status_code in (200, 201):
                    return {"ok": True, "portal_url": resp.json().get("url")}
                else:
                    log.error(f"[Stripe] Portal session failed {resp.status_code}: {resp.text}")
                    return {"ok": False, "error": self._error_message(resp)}
        except Exception as e:
            log.error(f"[Stripe] Exception creating portal session: {e}", exc_info=True)
            return {"ok": False, "error": str(e)}
