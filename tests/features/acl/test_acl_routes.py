"""HTTP tests for the ACL management routes."""

import pytest


ALICE = "alice@x.com"
BOB = "bob@x.com"


@pytest.fixture
async def panel_id(client, auth_headers):
    """A panel created (and therefore owned) by alice."""
    response = await client.post("/panels/", json={"name": "Intake"}, headers=auth_headers(ALICE))
    assert response.status_code == 201
    return response.json()["id"]


async def test_requests_without_token_are_unauthorized(client):
    response = await client.get("/acls/panel/1")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


async def test_token_without_tenant_is_unauthorized(client, auth_headers):
    response = await client.post(
        "/acls/panel/1",
        json={"user_email": BOB, "permission": "viewer"},
        headers=auth_headers(ALICE, tenant_id=None),
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized", "message": "Missing authentication context"}


async def test_owner_shares_panel(client, auth_headers, panel_id):
    response = await client.post(
        f"/acls/panel/{panel_id}",
        json={"user_email": BOB, "permission": "viewer"},
        headers=auth_headers(ALICE),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["tenant_id"] == "tenant-a"
    assert body["resource_type"] == "panel"
    assert body["resource_id"] == panel_id
    assert body["user_email"] == BOB
    assert body["permission"] == "viewer"
    assert body["created_at"] and body["updated_at"]

    response = await client.get(f"/panels/{panel_id}", headers=auth_headers(BOB))
    assert response.status_code == 200


async def test_duplicate_share_conflicts(client, auth_headers, panel_id):
    payload = {"user_email": BOB, "permission": "viewer"}
    first = await client.post(f"/acls/panel/{panel_id}", json=payload, headers=auth_headers(ALICE))
    second = await client.post(f"/acls/panel/{panel_id}", json=payload, headers=auth_headers(ALICE))

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["error"] == "Conflict"

    listing = await client.get(f"/acls/panel/{panel_id}", headers=auth_headers(ALICE))
    assert [entry["user_email"] for entry in listing.json()] == [ALICE, BOB]


async def test_non_owner_cannot_share(client, auth_headers, panel_id):
    await client.post(
        f"/acls/panel/{panel_id}",
        json={"user_email": BOB, "permission": "editor"},
        headers=auth_headers(ALICE),
    )

    response = await client.post(
        f"/acls/panel/{panel_id}",
        json={"user_email": "carol@x.com", "permission": "owner"},
        headers=auth_headers(BOB),
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden", "message": "Insufficient permission"}


async def test_sharing_unknown_resource_is_forbidden(client, auth_headers):
    response = await client.post(
        "/acls/view/999",
        json={"user_email": BOB, "permission": "viewer"},
        headers=auth_headers(ALICE),
    )
    assert response.status_code == 403


async def test_invalid_resource_type_or_permission(client, auth_headers, panel_id):
    response = await client.post(
        f"/acls/column/{panel_id}",
        json={"user_email": BOB, "permission": "viewer"},
        headers=auth_headers(ALICE),
    )
    assert response.status_code == 400

    response = await client.post(
        f"/acls/panel/{panel_id}",
        json={"user_email": BOB, "permission": "admin"},
        headers=auth_headers(ALICE),
    )
    assert response.status_code == 400
    assert "permission" in response.json()


async def test_list_by_user_includes_public_grants(client, auth_headers, panel_id):
    await client.post(
        f"/acls/panel/{panel_id}/share-public",
        json={"permission": "viewer"},
        headers=auth_headers(ALICE),
    )

    response = await client.get(f"/acls/user/{BOB}", headers=auth_headers(BOB))
    assert response.status_code == 200
    assert [(e["user_email"], e["permission"]) for e in response.json()] == [("_all", "viewer")]

    response = await client.get(f"/acls/user/{ALICE}?resource_type=view", headers=auth_headers(ALICE))
    assert response.json() == []

    response = await client.get(f"/acls/user/{ALICE}?resource_type=panel", headers=auth_headers(ALICE))
    assert [e["user_email"] for e in response.json()] == [ALICE, "_all"]


async def test_list_by_user_is_tenant_scoped(client, auth_headers, panel_id):
    response = await client.get(f"/acls/user/{ALICE}", headers=auth_headers(ALICE, tenant_id="tenant-b"))
    assert response.status_code == 200
    assert response.json() == []


async def test_share_public_creates_then_updates(client, auth_headers, panel_id):
    created = await client.post(
        f"/acls/panel/{panel_id}/share-public",
        json={"permission": "viewer"},
        headers=auth_headers(ALICE),
    )
    assert created.status_code == 201
    assert created.json()["user_email"] == "_all"

    updated = await client.post(
        f"/acls/panel/{panel_id}/share-public",
        json={"permission": "editor"},
        headers=auth_headers(ALICE),
    )
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["permission"] == "editor"

    response = await client.put(
        f"/panels/{panel_id}", json={"name": "Renamed"}, headers=auth_headers(BOB)
    )
    assert response.status_code == 200


async def test_update_and_delete_by_id(client, auth_headers, panel_id):
    created = await client.post(
        f"/acls/panel/{panel_id}",
        json={"user_email": BOB, "permission": "viewer"},
        headers=auth_headers(ALICE),
    )
    acl_id = created.json()["id"]

    response = await client.put(f"/acls/{acl_id}", json={"permission": "owner"}, headers=auth_headers(ALICE))
    assert response.status_code == 200
    assert response.json()["permission"] == "owner"

    effective = await client.get(f"/acls/panel/{panel_id}/effective", headers=auth_headers(BOB))
    assert effective.json()["granted_level"] == "owner"

    response = await client.delete(f"/acls/{acl_id}", headers=auth_headers(ALICE))
    assert response.status_code == 204

    response = await client.delete(f"/acls/{acl_id}", headers=auth_headers(ALICE))
    assert response.status_code == 404

    response = await client.get(f"/panels/{panel_id}", headers=auth_headers(BOB))
    assert response.status_code == 403


async def test_non_owner_cannot_change_entries(client, auth_headers, panel_id):
    created = await client.post(
        f"/acls/panel/{panel_id}",
        json={"user_email": BOB, "permission": "editor"},
        headers=auth_headers(ALICE),
    )
    acl_id = created.json()["id"]

    response = await client.put(f"/acls/{acl_id}", json={"permission": "owner"}, headers=auth_headers(BOB))
    assert response.status_code == 403

    response = await client.delete(f"/acls/{acl_id}", headers=auth_headers(BOB))
    assert response.status_code == 403


async def test_entries_of_other_tenants_are_not_found(client, auth_headers, panel_id):
    listing = await client.get(f"/acls/panel/{panel_id}", headers=auth_headers(ALICE))
    acl_id = listing.json()[0]["id"]

    response = await client.put(
        f"/acls/{acl_id}",
        json={"permission": "viewer"},
        headers=auth_headers(ALICE, tenant_id="tenant-b"),
    )
    assert response.status_code == 404


async def test_effective_access(client, auth_headers, panel_id):
    response = await client.get(f"/acls/panel/{panel_id}/effective", headers=auth_headers(ALICE))
    assert response.json() == {
        "allowed": True,
        "granted_level": "owner",
        "reason": f"direct grant on panel {panel_id}",
    }

    response = await client.get(f"/acls/panel/{panel_id}/effective", headers=auth_headers(BOB))
    assert response.json() == {"allowed": False, "granted_level": None, "reason": "no grant"}

    response = await client.get("/acls/panel/999/effective", headers=auth_headers(BOB))
    assert response.json() == {"allowed": False, "granted_level": None, "reason": "no grant"}


async def test_listing_resource_entries_requires_access(client, auth_headers, panel_id):
    response = await client.get(f"/acls/panel/{panel_id}", headers=auth_headers(BOB))
    assert response.status_code == 403
