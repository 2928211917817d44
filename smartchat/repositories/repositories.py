"""
Repository layer: read-only data access over Supabase tables.
All repos accept a Supabase AsyncClient; row-level security is whatever the
client's key tier and bearer token allow.
"""
import logging
from typing import Any, Optional

from supabase import AsyncClient

log = logging.getLogger(__name__)

ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing", "past_due")
WIDGET_SUMMARY_COLUMNS = "id, widget_key, welcome_message, primary_color, ai_instructions"


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class BaseRepository:
    def __init__(self, client: AsyncClient):
        self.client = client

    @staticmethod
    def _first(rows: Optional[list]) -> Optional[dict[str, Any]]:
        return rows[0] if rows else None


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------

class UserRepository(BaseRepository):
    async def get_by_email(self, email: str, columns: str = "id") -> Optional[dict[str, Any]]:
        """
        Exactly one user row for `email`, or None.
        An ambiguous email (more than one row) resolves to None.
        """
        result = await (
            self.client.table("users")
            .select(columns)
            .eq("email", email)
            .limit(2)
            .execute()
        )
        rows = result.data or []
        if len(rows) > 1:
            log.warning("[Users] More than one user row for one email, treating as unknown")
            return None
        return self._first(rows)

    async def get_id_by_email(self, email: str) -> Optional[str]:
        user = await self.get_by_email(email)
        return user["id"] if user else None

    async def get_stripe_customer_id(self, email: str) -> Optional[str]:
        user = await self.get_by_email(email, columns="stripe_customer_id")
        return user.get("stripe_customer_id") if user else None


# ---------------------------------------------------------------------------
# Subscription
# ---------------------------------------------------------------------------

class SubscriptionRepository(BaseRepository):
    async def get_latest_active(self, user_id: str) -> Optional[dict[str, Any]]:
        """
        Newest subscription in an active-like status.
        Ties on created_at are broken by id, descending.
        """
        result = await (
            self.client.table("subscriptions")
            .select("id, plan, status, current_period_end, cancel_at_period_end, created_at")
            .eq("user_id", user_id)
            .in_("status", list(ACTIVE_SUBSCRIPTION_STATUSES))
            .order("created_at", desc=True)
            .order("id", desc=True)
            .limit(1)
            .execute()
        )
        return self._first(result.data)


# ---------------------------------------------------------------------------
# Widget
# ---------------------------------------------------------------------------

class WidgetRepository(BaseRepository):
    async def list_for_owner(self, owner_id: str) -> list[dict[str, Any]]:
        result = await (
            self.client.table("widgets")
            .select(WIDGET_SUMMARY_COLUMNS)
            .eq("owner_id", owner_id)
            .order("created_at", desc=True)
            .execute()
        )
        return result.data or []
