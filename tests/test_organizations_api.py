import pytest

from portal.models.audit_log import AuditLog


@pytest.mark.asyncio
async def test_create_organization_allocates_slug(client, admin_headers, session_factory):
    first = await client.post(
        "/api/v1/organizations",
        json={"name": "Acme Gym", "business_type": "fitness"},
        headers=admin_headers,
    )
    second = await client.post(
        "/api/v1/organizations", json={"name": "Acme Gym"}, headers=admin_headers
    )

    assert first.status_code == 201
    assert first.json()["slug"] == "acme-gym"
    assert "Equipment" in first.json()["settings"]["photo_tags"]
    assert second.json()["slug"] == "acme-gym-1"

    with session_factory() as session:
        actions = [row.action for row in session.query(AuditLog).all()]
    assert actions == ["ORGANIZATION_CREATED", "ORGANIZATION_CREATED"]


@pytest.mark.asyncio
async def test_organization_endpoints_are_admin_only(client, client_headers):
    resp = await client.get("/api/v1/organizations", headers=client_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_projects(client, admin_headers):
    org = (
        await client.post(
            "/api/v1/organizations", json={"name": "Acme"}, headers=admin_headers
        )
    ).json()

    created = await client.post(
        "/api/v1/projects",
        json={"name": "Acme Site", "client_name": "Acme", "organization_id": org["id"]},
        headers=admin_headers,
    )
    orphan = await client.post(
        "/api/v1/projects",
        json={"name": "Lost", "client_name": "Nobody", "organization_id": 404},
        headers=admin_headers,
    )
    listed = await client.get(
        "/api/v1/projects", params={"organization_id": org["id"]}, headers=admin_headers
    )

    assert created.status_code == 201
    assert orphan.json()["error"]["code"] == "ORGANIZATION_NOT_FOUND"
    assert [p["name"] for p in listed.json()] == ["Acme Site"]


@pytest.mark.asyncio
async def test_health(client):
    live = await client.get("/api/healthz")
    ready = await client.get("/api/readyz")

    assert live.json()["ok"] is True
    assert ready.status_code == 200
    assert ready.json()["db"] == "up"
    assert "X-Request-ID" in live.headers


@pytest.mark.asyncio
async def test_request_id_is_propagated(client):
    resp = await client.get("/api/v1/invitations/validate", headers={"X-Request-ID": "abc123"})

    assert resp.headers["X-Request-ID"] == "abc123"
    assert resp.json()["error"]["trace_id"] == "abc123"
