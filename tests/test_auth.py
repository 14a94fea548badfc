"""Tests for admin login and token checks."""
import pytest

from app.core.security import decode_token
from tests.conftest import auth_headers


@pytest.mark.asyncio
async def test_login_success(client):
    resp = await client.post("/api/auth/login", json={"email": "Admin@Example.com", "password": "admin123"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    payload = decode_token(data["token"])
    assert payload["sub"] == "admin@example.com"
    assert payload["role"] == "admin"


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    resp = await client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_token_opens_admin_routes(client):
    resp = await client.post("/api/auth/login", json={"email": "admin@example.com", "password": "admin123"})
    token = resp.json()["token"]
    resp = await client.get("/api/csv/template", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_invalid_token_rejected(client):
    resp = await client.get("/api/csv/template", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_public_routes_need_no_token(client):
    resp = await client.get("/api/creators")
    assert resp.status_code == 200
    resp = await client.get("/api/locations")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health", headers=auth_headers())
    assert resp.json() == {"status": "ok"}
