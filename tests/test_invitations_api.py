import pytest

from portal.models.invitation import Invitation
from portal.models.organization import Organization
from portal.models.project import Project
from tests.conftest import ADMIN_PASSWORD

BOBS_GYM = {"business_name": "Bob's Gym", "business_type": "fitness"}


def _code(resp):
    body = resp.json()
    assert body["ok"] is False
    return body["error"]["code"]


async def _invite(client, headers, **payload):
    payload.setdefault("email", "bob@bobsgym.test")
    return await client.post("/api/v1/invitations", json=payload, headers=headers)


# --- admin-only surface --------------------------------------------------------

@pytest.mark.asyncio
async def test_create_requires_authentication(client):
    resp = await _invite(client, {}, organization_data=BOBS_GYM)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_requires_admin(client, client_headers):
    resp = await _invite(client, client_headers, email="new@client.test")
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_create_invitation(client, admin_headers, admin_user, notifier):
    resp = await _invite(
        client,
        admin_headers,
        email="Bob@BobsGym.test",
        name="Bob",
        organization_data=BOBS_GYM,
        message="Welcome aboard",
    )

    assert resp.status_code == 201
    body = resp.json()
    invitation = body["invitation"]
    assert invitation["email"] == "bob@bobsgym.test"
    assert invitation["status"] == "pending"
    assert invitation["invited_by"] == admin_user.id
    assert invitation["organization_data"]["business_name"] == "Bob's Gym"
    assert body["invite_link"] == (
        f"http://portal.test/accept-invite?token={invitation['token']}"
    )
    assert body["email_sent"] is True

    [sent] = notifier.sent
    assert sent["kind"] == "invitation"
    assert sent["to"] == "bob@bobsgym.test"
    assert sent["invite_link"] == body["invite_link"]
    assert sent["organization_name"] == "Bob's Gym"


@pytest.mark.asyncio
async def test_create_reports_email_failure_without_failing(client, admin_headers, notifier):
    notifier.succeed = False

    resp = await _invite(client, admin_headers, organization_data=BOBS_GYM)

    assert resp.status_code == 201
    assert resp.json()["email_sent"] is False


@pytest.mark.asyncio
async def test_one_pending_invitation_per_email(client, admin_headers):
    assert (await _invite(client, admin_headers)).status_code == 201

    resp = await _invite(client, admin_headers, email="BOB@bobsgym.test")

    assert resp.status_code == 400
    assert _code(resp) == "PENDING_INVITATION_EXISTS"


@pytest.mark.asyncio
async def test_cannot_invite_existing_user(client, admin_headers, client_user):
    resp = await _invite(client, admin_headers, email=client_user.email)

    assert resp.status_code == 400
    assert _code(resp) == "EMAIL_TAKEN"


@pytest.mark.asyncio
async def test_create_validates_references(client, admin_headers):
    blank = await _invite(client, admin_headers, organization_data={"business_name": "   "})
    no_org = await _invite(client, admin_headers, organization_id=404)
    no_project = await _invite(client, admin_headers, project_id=404)

    assert _code(blank) == "BUSINESS_NAME_REQUIRED"
    assert _code(no_org) == "ORGANIZATION_NOT_FOUND"
    assert _code(no_project) == "PROJECT_NOT_FOUND"


@pytest.mark.asyncio
async def test_project_lends_its_organization(client, admin_headers, db):
    org = Organization(name="Acme", slug="acme", status="active")
    db.add(org)
    db.flush()
    project = Project(name="Acme Site", client_name="Acme", organization_id=org.id)
    db.add(project)
    db.commit()

    resp = await _invite(
        client, admin_headers, project_id=project.id, organization_data=BOBS_GYM
    )

    invitation = resp.json()["invitation"]
    assert invitation["organization_id"] == org.id
    assert invitation["organization_data"] is None


@pytest.mark.asyncio
async def test_brand_colors_update_existing_organization(
    client, admin_headers, db, session_factory, notifier
):
    org = Organization(name="Acme", slug="acme", status="active", settings={"logo": "x.png"})
    db.add(org)
    db.commit()

    resp = await _invite(
        client,
        admin_headers,
        organization_id=org.id,
        brand_colors={"primary": "#123456", "accent": "#abcdef"},
    )

    assert resp.status_code == 201
    with session_factory() as session:
        settings = session.get(Organization, org.id).settings
    assert settings == {
        "logo": "x.png",
        "brand_colors": {"primary": "#123456", "accent": "#abcdef"},
    }
    assert notifier.sent[0]["brand_colors"] == {"primary": "#123456", "accent": "#abcdef"}


@pytest.mark.asyncio
async def test_list_invitations(client, admin_headers, make_invitation):
    make_invitation(email="a@example.test")
    make_invitation(email="b@example.test")

    resp = await client.get("/api/v1/invitations", headers=admin_headers)

    assert resp.status_code == 200
    assert {item["email"] for item in resp.json()} == {"a@example.test", "b@example.test"}


# --- public flow -----------------------------------------------------------------

@pytest.mark.asyncio
async def test_validate_token(client, make_invitation):
    invitation = make_invitation(organization_data=BOBS_GYM)

    missing = await client.get("/api/v1/invitations/validate")
    unknown = await client.get("/api/v1/invitations/validate", params={"token": "nope"})
    ok = await client.get("/api/v1/invitations/validate", params={"token": invitation.token})

    assert (missing.status_code, _code(missing)) == (400, "NO_TOKEN")
    assert (unknown.status_code, _code(unknown)) == (400, "INVALID_TOKEN")
    assert ok.status_code == 200
    public = ok.json()["invitation"]
    assert public["email"] == "bob@bobsgym.test"
    assert public["organization_data"]["business_name"] == "Bob's Gym"
    assert "token" not in public


@pytest.mark.asyncio
async def test_accept_then_login(client, make_invitation, notifier):
    invitation = make_invitation(organization_data=BOBS_GYM)

    resp = await client.post(
        "/api/v1/invitations/accept",
        json={"token": invitation.token, "password": "bobs-password", "name": "Bob"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["auto_login"] == {"email": "bob@bobsgym.test", "password": "bobs-password"}
    assert body["organization"]["slug"] == "bobs-gym"
    assert body["project"]["name"] == "Bob's Gym Website"
    assert body["user"]["organization_id"] == body["organization"]["id"]
    assert body["email_sent"] is True
    assert notifier.sent[-1]["kind"] == "welcome"
    assert notifier.sent[-1]["login_url"] == "http://portal.test/login"

    login = await client.post(
        "/api/v1/login", data={"username": "bob@bobsgym.test", "password": "bobs-password"}
    )
    assert login.status_code == 200
    me = await client.get(
        "/api/v1/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"}
    )
    assert me.json()["email"] == "bob@bobsgym.test"

    again = await client.get("/api/v1/invitations/validate", params={"token": invitation.token})
    assert _code(again) == "ALREADY_ACCEPTED"


@pytest.mark.asyncio
async def test_accept_rejects_weak_password_and_missing_token(client, make_invitation):
    invitation = make_invitation()

    weak = await client.post(
        "/api/v1/invitations/accept", json={"token": invitation.token, "password": "1234567"}
    )
    no_token = await client.post(
        "/api/v1/invitations/accept", json={"password": "long-enough-password"}
    )

    assert _code(weak) == "WEAK_PASSWORD"
    assert _code(no_token) == "NO_TOKEN"


@pytest.mark.asyncio
async def test_accept_existing_email(client, make_invitation, client_user, session_factory):
    invitation = make_invitation(email=client_user.email)

    resp = await client.post(
        "/api/v1/invitations/accept",
        json={"token": invitation.token, "password": "long-enough-password"},
    )

    assert _code(resp) == "EMAIL_TAKEN"
    with session_factory() as session:
        assert session.get(Invitation, invitation.id).status == "accepted"


@pytest.mark.asyncio
async def test_revoke(client, admin_headers, make_invitation):
    invitation = make_invitation()

    resp = await client.delete(f"/api/v1/invitations/{invitation.id}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["invitation"]["status"] == "revoked"

    again = await client.delete(f"/api/v1/invitations/{invitation.id}", headers=admin_headers)
    accept = await client.post(
        "/api/v1/invitations/accept",
        json={"token": invitation.token, "password": "long-enough-password"},
    )
    missing = await client.delete("/api/v1/invitations/9999", headers=admin_headers)

    assert _code(again) == "NOT_PENDING"
    assert _code(accept) == "REVOKED"
    assert (missing.status_code, _code(missing)) == (404, "NOT_FOUND")


@pytest.mark.asyncio
async def test_resend_rotates_token(client, admin_headers, make_invitation, notifier):
    invitation = make_invitation()

    resp = await client.post(
        f"/api/v1/invitations/{invitation.id}/resend", headers=admin_headers
    )

    assert resp.status_code == 200
    new_token = resp.json()["invitation"]["token"]
    assert new_token != invitation.token
    assert resp.json()["email_sent"] is True
    assert notifier.sent[-1]["invite_link"].endswith(new_token)

    old = await client.get("/api/v1/invitations/validate", params={"token": invitation.token})
    new = await client.get("/api/v1/invitations/validate", params={"token": new_token})
    assert _code(old) == "INVALID_TOKEN"
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_resend_requires_pending(client, admin_headers, make_invitation):
    invitation = make_invitation(status="revoked")

    resp = await client.post(
        f"/api/v1/invitations/{invitation.id}/resend", headers=admin_headers
    )

    assert _code(resp) == "NOT_PENDING"


# --- demo business type ------------------------------------------------------------

@pytest.mark.asyncio
async def test_demo_invitation_business_type(client, make_invitation, session_factory):
    invitation = make_invitation(is_demo=True, organization_data=BOBS_GYM)
    url = f"/api/v1/invitations/{invitation.id}/business-type"

    resp = await client.post(url, json={"token": invitation.token, "business_type": "restaurant"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["organization_data"]["business_type"] == "restaurant"
    assert "Menu" in body["photo_tags"]
    with session_factory() as session:
        stored = session.get(Invitation, invitation.id).organization_data
    assert stored["business_type"] == "restaurant"
    assert stored["custom_photo_tags"] == body["photo_tags"]
    assert stored["business_name"] == "Bob's Gym"


@pytest.mark.asyncio
async def test_business_type_guards(client, make_invitation):
    demo = make_invitation(is_demo=True, organization_data=BOBS_GYM)
    regular = make_invitation(email="reg@example.test", organization_data=BOBS_GYM)

    wrong_token = await client.post(
        f"/api/v1/invitations/{demo.id}/business-type",
        json={"token": regular.token, "business_type": "retail"},
    )
    bad_type = await client.post(
        f"/api/v1/invitations/{demo.id}/business-type",
        json={"token": demo.token, "business_type": "spaceship"},
    )
    not_demo = await client.post(
        f"/api/v1/invitations/{regular.id}/business-type",
        json={"token": regular.token, "business_type": "retail"},
    )

    assert (wrong_token.status_code, _code(wrong_token)) == (403, "INVALID_TOKEN")
    assert _code(bad_type) == "INVALID_BUSINESS_TYPE"
    assert "retail" in bad_type.json()["error"]["details"]["available_types"]
    assert _code(not_demo) == "NOT_DEMO"


# --- auth --------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_rejects_wrong_password(client, admin_user):
    ok = await client.post(
        "/api/v1/login", data={"username": admin_user.email, "password": ADMIN_PASSWORD}
    )
    bad = await client.post(
        "/api/v1/login", data={"username": admin_user.email, "password": "wrong-password"}
    )

    assert ok.status_code == 200
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_business_type_rejects_non_ascii_token(client, make_invitation):
    demo = make_invitation(is_demo=True, organization_data=BOBS_GYM)

    resp = await client.post(
        f"/api/v1/invitations/{demo.id}/business-type",
        json={"token": "é", "business_type": "fitness"},
    )

    assert (resp.status_code, _code(resp)) == (403, "INVALID_TOKEN")
