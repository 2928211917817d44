"""
FastAPI dependency functions for sessions, clients and repositories.

External-service handles live on app.state (built in the lifespan) and are
only ever reached through these functions, so tests swap them via
app.dependency_overrides.
"""
from typing import AsyncIterator, Optional

from fastapi import Depends, Request
from supabase import AsyncClient

from smartchat.core.errors import UnauthorizedError
from smartchat.core.session import CallerIdentity, CookieContext, SupabaseClientFactory
from smartchat.repositories.repositories import (
    SubscriptionRepository,
    UserRepository,
    WidgetRepository,
)
from smartchat.services.stripe_service import StripeService


def get_cookie_context(request: Request) -> CookieContext:
    return CookieContext(request.cookies)


def get_supabase_factory(request: Request) -> SupabaseClientFactory:
    return request.app.state.supabase


def get_stripe_service(request: Request) -> StripeService:
    return request.app.state.stripe


async def get_optional_identity(
    ctx: CookieContext = Depends(get_cookie_context),
    factory: SupabaseClientFactory = Depends(get_supabase_factory),
) -> Optional[CallerIdentity]:
    return await factory.resolve_identity(ctx)


async def get_current_identity(
    identity: Optional[CallerIdentity] = Depends(get_optional_identity),
) -> CallerIdentity:
    if identity is None:
        raise UnauthorizedError()
    return identity


async def get_scoped_client(
    ctx: CookieContext = Depends(get_cookie_context),
    factory: SupabaseClientFactory = Depends(get_supabase_factory),
) -> AsyncIterator[AsyncClient]:
    client = await factory.scoped_client(ctx)
    try:
        yield client
    finally:
        await factory.close_client(client)


async def get_admin_client(
    factory: SupabaseClientFactory = Depends(get_supabase_factory),
) -> AsyncClient:
    return await factory.admin_client()


def get_widget_repository(client: AsyncClient = Depends(get_scoped_client)) -> WidgetRepository:
    return WidgetRepository(client)


def get_user_repository(client: AsyncClient = Depends(get_admin_client)) -> UserRepository:
    return UserRepository(client)


def get_subscription_repository(client: AsyncClient = Depends(get_admin_client)) -> SubscriptionRepository:
    return SubscriptionRepository(client)
