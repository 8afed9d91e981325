import pytest

from tests.fixtures_seed import headers

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_bootstrap_super_admin_once(client):
    body = {"external_id": "root-1", "email": "root@test.com", "first_name": "Root"}
    r = await client.post("/v1/bootstrap/super-admin", headers={"X-Internal-Admin-Key": "test-internal"}, json=body)
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["user"]["role"] == "SUPER_ADMIN"
    assert created["user"]["agency_id"] is None

    r = await client.get("/v1/me", headers={"X-API-Key": created["api_key"]["plain_key"]})
    assert r.status_code == 200, r.text
    assert r.json()["role"] == "SUPER_ADMIN"

    r = await client.post(
        "/v1/bootstrap/super-admin",
        headers={"X-Internal-Admin-Key": "test-internal"},
        json={**body, "external_id": "root-2"},
    )
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_agencies_are_super_admin_only(client, seed_portal):
    r = await client.post("/v1/agencies", headers=headers(seed_portal, "super_admin"), json={"name": "Agency Z"})
    assert r.status_code == 201, r.text
    agency_z = r.json()
    assert agency_z["active"] is True

    r = await client.get(
        "/v1/agencies",
        headers=headers(seed_portal, "super_admin"),
        params={"sortBy": "name", "sortOrder": "asc", "limit": 2},
    )
    assert r.status_code == 200, r.text
    page = r.json()
    assert page["total_count"] == 3
    assert page["has_more"] is True
    assert [a["name"] for a in page["agencies"]] == ["Agency X", "Agency Y"]
    assert page["agencies"][0]["user_count"] == 3

    r = await client.patch(
        f"/v1/agencies/{agency_z['id']}",
        headers=headers(seed_portal, "super_admin"),
        json={"active": False},
    )
    assert r.status_code == 200
    assert r.json()["active"] is False

    r = await client.get("/v1/agencies", headers=headers(seed_portal, "super_admin"), params={"active": "false"})
    assert [a["id"] for a in r.json()["agencies"]] == [agency_z["id"]]

    r = await client.get("/v1/agencies", headers=headers(seed_portal, "admin_x"))
    assert r.status_code == 403

    r = await client.post("/v1/agencies", headers=headers(seed_portal, "super_admin"), json={"name": "Z"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_agency_admin_creates_agents_in_own_agency(client, seed_portal):
    r = await client.post(
        "/v1/users",
        headers=headers(seed_portal, "admin_x"),
        json={"external_id": "agent-x3", "email": "x3@test.com", "first_name": "New"},
    )
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["user"]["role"] == "AGENT"
    assert created["user"]["agency_id"] == seed_portal["agency_x"]

    r = await client.get("/v1/me", headers={"X-API-Key": created["api_key"]["plain_key"]})
    assert r.json()["agency_id"] == seed_portal["agency_x"]

    r = await client.post(
        "/v1/users",
        headers=headers(seed_portal, "admin_x"),
        json={"external_id": "admin-x2", "email": "ax2@test.com", "role": "AGENCY_ADMIN"},
    )
    assert r.status_code == 403

    r = await client.post(
        "/v1/users",
        headers=headers(seed_portal, "admin_x"),
        json={"external_id": "agent-x4", "email": "x4@test.com", "agency_id": seed_portal["agency_y"]},
    )
    assert r.status_code == 403

    r = await client.post(
        "/v1/users",
        headers=headers(seed_portal, "admin_x"),
        json={"external_id": "agent-x3", "email": "dup@test.com"},
    )
    assert r.status_code == 409

    r = await client.get("/v1/users", headers=headers(seed_portal, "admin_x"))
    assert {u["agency_id"] for u in r.json()} == {seed_portal["agency_x"]}


@pytest.mark.asyncio
async def test_deactivated_user_key_stops_working(client, seed_portal):
    agent_id = seed_portal["agent_x2"]["id"]

    r = await client.patch(f"/v1/users/{agent_id}", headers=headers(seed_portal, "admin_y"), json={"active": False})
    assert r.status_code == 403

    r = await client.patch(f"/v1/users/{agent_id}", headers=headers(seed_portal, "admin_x"), json={"active": False})
    assert r.status_code == 200, r.text

    r = await client.get("/v1/me", headers=headers(seed_portal, "agent_x2"))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_rotate_key_invalidates_previous(client, seed_portal):
    agent_id = seed_portal["agent_x1"]["id"]

    r = await client.post(f"/v1/users/{agent_id}/rotate-key", headers=headers(seed_portal, "agent_x1"))
    assert r.status_code == 200, r.text
    new_key = r.json()["plain_key"]

    r = await client.get("/v1/me", headers=headers(seed_portal, "agent_x1"))
    assert r.status_code == 401

    r = await client.get("/v1/me", headers={"X-API-Key": new_key})
    assert r.status_code == 200
    assert r.json()["user_id"] == agent_id
