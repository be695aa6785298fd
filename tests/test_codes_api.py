# Copyright (C) 2024 FP Innova Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Code endpoints: admin management and public validate/redeem."""

from httpx import AsyncClient

from fpinnova_server.rate_limit import LIMITS


async def _create(client: AsyncClient, headers: dict, **body) -> dict:
    payload = {"type": "reviewer", "expiration_hours": 24, "max_uses": 1}
    payload.update(body)
    r = await client.post("/api/v1/admin/codes", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


async def test_create_code_requires_auth(client: AsyncClient):
    r = await client.post("/api/v1/admin/codes", json={"type": "reviewer"})
    assert r.status_code == 401


async def test_create_code_requires_admin(client: AsyncClient, reviewer_headers: dict):
    r = await client.post("/api/v1/admin/codes", json={"type": "reviewer"}, headers=reviewer_headers)
    assert r.status_code == 403


async def test_create_code(client: AsyncClient, admin_headers: dict):
    data = await _create(client, admin_headers, max_uses=3)
    assert data["status"] == "active"
    assert data["current_uses"] == 0
    assert data["max_uses"] == 3
    assert data["type"] == "reviewer"
    assert len(data["code"]) == 8


async def test_create_code_defaults(client: AsyncClient, admin_headers: dict):
    r = await client.post("/api/v1/admin/codes", json={"type": "presenter"}, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["max_uses"] == 1


async def test_create_code_rejects_bad_input(client: AsyncClient, admin_headers: dict):
    for body in (
        {"type": "reviewer", "max_uses": 0},
        {"type": "reviewer", "expiration_hours": -1},
        {"type": "janitor"},
        {"type": "reviewer", "expiration_hours": 1e8},
    ):
        r = await client.post("/api/v1/admin/codes", json=body, headers=admin_headers)
        assert r.status_code == 422, body


async def test_redeem_flow(client: AsyncClient, admin_headers: dict):
    created = await _create(client, admin_headers, max_uses=2)

    r = await client.post("/api/v1/codes/validate", json={"code": created["code"].lower()})
    assert r.status_code == 200
    assert r.json()["remaining_uses"] == 2
    assert r.json()["type"] == "reviewer"

    r = await client.post("/api/v1/codes/redeem", json={"code": created["code"]})
    assert r.status_code == 200
    assert r.json()["remaining_uses"] == 1

    r = await client.post("/api/v1/codes/redeem", json={"code": created["code"]})
    assert r.status_code == 200
    assert r.json()["remaining_uses"] == 0

    r = await client.post("/api/v1/codes/redeem", json={"code": created["code"]})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid or expired code"


async def test_invalid_reasons_look_the_same(client: AsyncClient, admin_headers: dict, clock):
    """Unknown, expired and revoked codes all get the same answer."""
    expired = await _create(client, admin_headers, expiration_hours=1)
    revoked = await _create(client, admin_headers, expiration_hours=48)
    r = await client.post(f"/api/v1/admin/codes/{revoked['id']}/revoke", headers=admin_headers)
    assert r.status_code == 204
    clock.advance(hours=2)

    details = set()
    for code in ("NOPE1234", expired["code"], revoked["code"]):
        r = await client.post("/api/v1/codes/redeem", json={"code": code})
        assert r.status_code == 400
        details.add(r.json()["detail"])
    assert details == {"Invalid or expired code"}

    r = await client.get("/api/v1/admin/codes/logs", params={"code_id": expired["id"]}, headers=admin_headers)
    assert r.status_code == 200
    assert {entry["action"] for entry in r.json()} == {"generated", "expired"}


async def test_list_codes_with_filters(client: AsyncClient, admin_headers: dict):
    a = await _create(client, admin_headers, type="reviewer")
    b = await _create(client, admin_headers, type="presenter")
    r = await client.post(
        f"/api/v1/admin/codes/{b['id']}/revoke", json={"reason": "expired"}, headers=admin_headers
    )
    assert r.status_code == 204

    r = await client.get("/api/v1/admin/codes", headers=admin_headers)
    assert {c["id"] for c in r.json()} == {a["id"], b["id"]}

    r = await client.get("/api/v1/admin/codes", params={"status": "active"}, headers=admin_headers)
    assert [c["id"] for c in r.json()] == [a["id"]]

    r = await client.get("/api/v1/admin/codes", params={"type": "presenter"}, headers=admin_headers)
    assert [c["id"] for c in r.json()] == [b["id"]]
    assert r.json()[0]["status"] == "expired"

    r = await client.get("/api/v1/admin/codes", params={"status": "bogus"}, headers=admin_headers)
    assert r.status_code == 422


async def test_revoke_rejects_active_reason(client: AsyncClient, admin_headers: dict):
    created = await _create(client, admin_headers)
    r = await client.post(
        f"/api/v1/admin/codes/{created['id']}/revoke", json={"reason": "active"}, headers=admin_headers
    )
    assert r.status_code == 400


async def test_revoke_unknown_code(client: AsyncClient, admin_headers: dict):
    r = await client.post("/api/v1/admin/codes/missing/revoke", headers=admin_headers)
    assert r.status_code == 204


async def test_cleanup_endpoint(client: AsyncClient, admin_headers: dict, clock):
    await _create(client, admin_headers, expiration_hours=1)
    await _create(client, admin_headers, expiration_hours=10)
    clock.advance(hours=2)
    r = await client.post("/api/v1/admin/codes/cleanup", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"cleaned": 1}
    r = await client.post("/api/v1/admin/codes/cleanup", headers=admin_headers)
    assert r.json() == {"cleaned": 0}


async def test_redeem_is_rate_limited(client: AsyncClient):
    limit = LIMITS["/api/v1/codes/redeem"]
    for _ in range(limit):
        r = await client.post("/api/v1/codes/redeem", json={"code": "GUESS123"})
        assert r.status_code == 400
    r = await client.post("/api/v1/codes/redeem", json={"code": "GUESS123"})
    assert r.status_code == 429
