import pytest
from httpx import AsyncClient

from smartchat.core.config import settings

API = settings.API_PREFIX


@pytest.mark.asyncio
async def test_correct_password(client: AsyncClient):
    response = await client.post(f"{API}/auth", json={"password": "Open-Sesame"})
    assert response.status_code == 200
    assert response.json() == {"success": True}


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["open-sesame", "Open-Sesame ", " Open-Sesame", "", "wrong"])
async def test_near_misses_are_rejected(client: AsyncClient, password):
    response = await client.post(f"{API}/auth", json={"password": password})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid password"}


@pytest.mark.asyncio
async def test_missing_password_is_rejected(client: AsyncClient):
    response = await client.post(f"{API}/auth", json={})
    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["Open-Sesame", "anything", ""])
async def test_unconfigured_password_is_server_error(client: AsyncClient, monkeypatch, password):
    monkeypatch.setattr(settings, "DASHBOARD_PASSWORD", None)
    response = await client.post(f"{API}/auth", json={"password": password})
    assert response.status_code == 500
    body = response.json()
    assert body == {"error": "Server configuration error"}
    assert "DASHBOARD_PASSWORD" not in body["error"]


@pytest.mark.asyncio
async def test_malformed_body_is_bad_request(client: AsyncClient):
    response = await client.post(
        f"{API}/auth",
        content="not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request"}
