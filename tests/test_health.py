import pytest


@pytest.mark.asyncio
async def test_health(anon_client):
    r = await anon_client.get("/v1/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_missing_api_key_is_401(anon_client):
    r = await anon_client.get("/v1/me")
    assert r.status_code == 401
    assert r.json()["code"] == "authentication_required"


@pytest.mark.asyncio
async def test_bootstrap_requires_internal_key(anon_client):
    r = await anon_client.post("/v1/bootstrap/super-admin", json={"external_id": "x", "email": "x@test.com"})
    assert r.status_code == 403
    assert r.json()["code"] == "forbidden"
