import os
import base64
import json
from collections import defaultdict
from types import SimpleNamespace

# ── Environment Overrides ───────────────────────────────────────────
os.environ["SUPABASE_URL"] = "https://testproject.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "anon-test-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-test-key"
os.environ["DASHBOARD_PASSWORD"] = "Open-Sesame"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_123"
os.environ["APP_BASE_URL"] = "https://app.test"
# ────────────────────────────────────────────────────────────────────

import pytest
from httpx import ASGITransport, AsyncClient

from smartchat.main import app
from smartchat.core.config import settings
from smartchat.core.deps import get_stripe_service, get_supabase_factory
from smartchat.core.session import SupabaseClientFactory


# ---------------------------------------------------------------------------
# In-memory Supabase
# ---------------------------------------------------------------------------

class FakeQuery:
    """Just enough of the PostgREST builder: select / eq / in_ / order / limit / execute."""

    def __init__(self, backend, table):
        self.backend = backend
        self.table = table
        self.columns = None
        self.filters = []
        self.orders = []
        self.max_rows = None

    def select(self, columns="*"):
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",")]
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, *, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, size):
        self.max_rows = size
        return self

    async def execute(self):
        self.backend.queries.append(self)
        if self.table in self.backend.failing_tables:
            raise RuntimeError(f"relation {self.table} is unavailable")

        rows = [r for r in self.backend.tables[self.table] if all(f(r) for f in self.filters)]
        for column, desc in reversed(self.orders):
            rows.sort(key=lambda r: r[column], reverse=desc)
        if self.max_rows is not None:
            rows = rows[: self.max_rows]
        if self.columns:
            rows = [{c: r.get(c) for c in self.columns} for r in rows]
        return SimpleNamespace(data=[dict(r) for r in rows])


class FakeAuth:
    def __init__(self, backend):
        self.backend = backend
        self.closed = False

    async def get_user(self, jwt=None):
        self.backend.auth_calls.append(jwt)
        if self.backend.auth_down:
            raise ConnectionError("auth service unreachable")
        user = self.backend.sessions.get(jwt)
        if user is None:
            raise ValueError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(**user))

    async def close(self):
        self.closed = True


class FakePostgrest:
    def __init__(self):
        self.closed = False

    async def aclose(self):
        self.closed = True


class FakeSupabaseClient:
    def __init__(self, backend, key, options):
        self.backend = backend
        self.key = key
        self.headers = dict(options.headers) if options else {}
        self.auth = FakeAuth(backend)
        self.postgrest = FakePostgrest()

    @property
    def closed(self):
        return self.postgrest.closed and self.auth.closed

    def table(self, name):
        return FakeQuery(self.backend, name)


class FakeSupabase:
    def __init__(self):
        self.tables = defaultdict(list)
        self.sessions = {}
        self.clients = []
        self.queries = []
        self.auth_calls = []
        self.failing_tables = set()
        self.auth_down = False

    def insert(self, table, **row):
        self.tables[table].append(row)
        return row

    def add_session(self, token, user_id, email=None):
        self.sessions[token] = {"id": user_id, "email": email}

    async def create_client(self, url, key, options=None):
        client = FakeSupabaseClient(self, key, options)
        self.clients.append(client)
        return client


# ---------------------------------------------------------------------------
# Stripe double
# ---------------------------------------------------------------------------

class FakeStripe:
    def __init__(self):
        self.checkout_calls = []
        self.portal_calls = []
        self.checkout_result = {
            "ok": True,
            "session_id": "cs_test_123",
            "checkout_url": "https://checkout.stripe.com/c/pay/cs_test_123",
        }
        self.portal_result = {"ok": True, "portal_url": "https://billing.stripe.com/p/session/test_123"}

    async def create_checkout_session(self, **kwargs):
        self.checkout_calls.append(kwargs)
        return self.checkout_result

    async def create_portal_session(self, customer_id, return_url=None):
        self.portal_calls.append({"customer_id": customer_id, "return_url": return_url})
        return self.portal_result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def supabase_factory(supabase):
    return SupabaseClientFactory(
        url=settings.SUPABASE_URL,
        anon_key=settings.SUPABASE_ANON_KEY,
        service_role_key=settings.SUPABASE_SERVICE_ROLE_KEY,
        client_creator=supabase.create_client,
    )


@pytest.fixture
def stripe():
    return FakeStripe()


@pytest.fixture(autouse=True)
def override_services(supabase_factory, stripe):
    app.dependency_overrides[get_supabase_factory] = lambda: supabase_factory
    app.dependency_overrides[get_stripe_service] = lambda: stripe
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def session_cookie(supabase_factory):
    """Build a Cookie header the way @supabase/ssr stores the session."""
    def _build(access_token: str) -> dict:
        session = json.dumps({"access_token": access_token, "refresh_token": "r", "token_type": "bearer"})
        encoded = base64.urlsafe_b64encode(session.encode()).decode().rstrip("=")
        return {"Cookie": f"{supabase_factory.session_cookie_name}=base64-{encoded}"}
    return _build


@pytest.fixture
async def client():
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
