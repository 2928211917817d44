"""
smartchat/core/session.py
──────────────────────────
Cookie-carried Supabase sessions: identity resolution and scoped clients.

The browser holds the Supabase session in the SSR auth cookie:

  sb-<project-ref>-auth-token          single cookie, or
  sb-<project-ref>-auth-token.0, .1 …  chunks to be concatenated

The value is JSON (a session object, or the legacy array whose first item
is the access token), optionally prefixed with "base64-" and encoded as
base64url.

Two handles are built from that cookie:
  - resolve_identity(ctx) → CallerIdentity | None   (Supabase Auth)
  - scoped_client(ctx)    → client whose requests carry the caller's JWT,
                            so row-level security applies in PostgREST
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional
from urllib.parse import urlparse

from supabase import AsyncClient, AsyncClientOptions, acreate_client

log = logging.getLogger(__name__)

BASE64_PREFIX = "base64-"
MAX_COOKIE_CHUNKS = 16

ClientCreator = Callable[..., Awaitable[AsyncClient]]


@dataclass(frozen=True)
class CallerIdentity:
    id: str
    email: Optional[str] = None


class CookieContext:
    """Read-only view of one request's cookies."""

    def __init__(self, cookies: Mapping[str, str]):
        self._cookies = dict(cookies)

    def get(self, name: str) -> Optional[str]:
        return self._cookies.get(name)

    def _raw_value(self, name: str) -> Optional[str]:
        value = self.get(name)
        if value is not None:
            return value
        chunks = []
        for i in range(MAX_COOKIE_CHUNKS):
            chunk = self.get(f"{name}.{i}")
            if chunk is None:
                break
            chunks.append(chunk)
        return "".join(chunks) or None

    def session_token(self, name: str) -> Optional[str]:
        """
        Extract the access token from the auth cookie `name`.
        Returns None when the cookie is absent or cannot be decoded.
        """
        raw = self._raw_value(name)
        if not raw:
            return None

        try:
            if raw.startswith(BASE64_PREFIX):
                encoded = raw[len(BASE64_PREFIX):]
                encoded += "=" * (-len(encoded) % 4)
                raw = base64.urlsafe_b64decode(encoded).decode("utf-8")
            session = json.loads(raw)
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            log.warning(f"[Auth] Unreadable session cookie {name}: {e}")
            return None

        if isinstance(session, dict):
            token = session.get("access_token")
        elif isinstance(session, list) and session:
            token = session[0]
        else:
            token = None
        return token if isinstance(token, str) and token else None


class SupabaseClientFactory:
    """
    Builds Supabase clients for the two key tiers.

    The anon key backs per-caller clients; the service-role key backs the
    admin client used for billing lookups that must bypass RLS.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        service_role_key: Optional[str] = None,
        client_creator: ClientCreator = acreate_client,
    ):
        self.url = url
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self._create = client_creator
        self._anon: Optional[AsyncClient] = None
        self._admin: Optional[AsyncClient] = None

    @property
    def session_cookie_name(self) -> str:
        project_ref = (urlparse(self.url).hostname or "").split(".")[0]
        return f"sb-{project_ref}-auth-token"

    def access_token(self, ctx: CookieContext) -> Optional[str]:
        return ctx.session_token(self.session_cookie_name)

    async def _client(self, key: str, access_token: Optional[str] = None) -> AsyncClient:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        options = AsyncClientOptions(
            headers=headers,
            auto_refresh_token=False,
            persist_session=False,
        )
        return await self._create(self.url, key, options=options)

    async def resolve_identity(self, ctx: CookieContext) -> Optional[CallerIdentity]:
        """
        Resolve the caller from the session cookie.
        Any failure (no cookie, bad token, provider error) yields None.
        """
        token = self.access_token(ctx)
        if not token:
            return None

        try:
            client = await self.anon_client()
            response = await client.auth.get_user(token)
        except Exception as e:
            log.warning(f"[Auth] Session lookup failed: {e}")
            return None

        user = getattr(response, "user", None)
        if not user or not getattr(user, "id", None):
            return None
        return CallerIdentity(id=str(user.id), email=getattr(user, "email", None))

    async def scoped_client(self, ctx: CookieContext) -> AsyncClient:
        """Per-request client; the caller must hand it back to close_client()."""
        return await self._client(self.anon_key, self.access_token(ctx))

    async def close_client(self, client: AsyncClient) -> None:
        """Close the PostgREST and Auth HTTP sessions of a per-request client."""
        try:
            await client.postgrest.aclose()
            await client.auth.close()
        except Exception as e:
            log.warning(f"[Supabase] Failed to close scoped client: {e}")

    async def anon_client(self) -> AsyncClient:
        # Shared across requests; only used for auth.get_user(jwt).
        if self._anon is None:
            self._anon = await self._client(self.anon_key)
        return self._anon

    async def admin_client(self) -> AsyncClient:
        if self._admin is None:
            key = self.service_role_key
            if not key:
                log.warning("[Supabase] SUPABASE_SERVICE_ROLE_KEY not set, admin client uses the anon key")
                key = self.anon_key
            self._admin = await self._client(key)
        return self._admin

    async def aclose(self) -> None:
        for client in (self._anon, self._admin):
            if client is not None:
                await self.close_client(client)
        self._anon = self._admin = None
