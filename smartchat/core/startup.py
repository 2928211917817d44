import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from smartchat.core.config import settings
from smartchat.core.session import SupabaseClientFactory
from smartchat.services.stripe_service import StripeService

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────────────
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    # 1. Supabase (identity + data store)
    app.state.supabase = SupabaseClientFactory(
        url=settings.SUPABASE_URL,
        anon_key=settings.SUPABASE_ANON_KEY,
        service_role_key=settings.SUPABASE_SERVICE_ROLE_KEY,
    )
    log.info("Supabase client factory ready for %s", settings.SUPABASE_URL)

    # 2. Stripe
    app.state.stripe = StripeService()
    if not app.state.stripe.enabled:
        log.warning("⚠️  STRIPE_SECRET_KEY not set, checkout and portal will fail.")
    if not settings.DASHBOARD_PASSWORD:
        log.warning("⚠️  DASHBOARD_PASSWORD not set, dashboard login will fail.")

    yield  # Application runs here

    # ── Shutdown ─────────────────────────────────────────────────────────
    await app.state.supabase.aclose()
    log.info("SmartChat API shutting down.")
