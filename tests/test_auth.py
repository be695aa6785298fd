# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Auth endpoint tests."""

from httpx import AsyncClient


async def test_login_invalid_credentials(client: AsyncClient, admin_user):
    """Login with wrong password returns 401."""
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "admin@fpinnova.es", "password": "wrong"},
    )
    assert r.status_code == 401
    assert "detail" in r.json()


async def test_login_and_me(client: AsyncClient, admin_user):
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "Admin@FPInnova.es", "password": "secret123"},
    )
    assert r.status_code == 200
    token = r.json()["access_token"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "admin@fpinnova.es"
    assert me.json()["role"] == "admin"


async def test_me_requires_auth(client: AsyncClient):
    """GET /auth/me without token returns 401."""
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401


async def test_me_rejects_garbage_token(client: AsyncClient):
    r = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


async def test_me_ignores_token_cookie(client: AsyncClient, admin_user):
    """Only the Authorization header authenticates."""
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "admin@fpinnova.es", "password": "secret123"},
    )
    client.cookies.set("fpinnova_token", r.json()["access_token"])
    me = await client.get("/api/v1/auth/me")
    assert me.status_code == 401
