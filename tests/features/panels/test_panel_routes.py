"""HTTP tests for panel routes."""

from sqlalchemy import select

from app.features.acl.models import AccessControlList


ALICE = "alice@x.com"
BOB = "bob@x.com"


async def create_panel(client, headers, name="Intake"):
    response = await client.post("/panels/", json={"name": name, "metadata": {"color": "blue"}}, headers=headers)
    assert response.status_code == 201
    return response.json()


async def test_create_panel_makes_creator_owner(client, auth_headers):
    panel = await create_panel(client, auth_headers(ALICE, user_id="user-alice"))

    assert panel["tenant_id"] == "tenant-a"
    assert panel["user_id"] == "user-alice"
    assert panel["metadata"] == {"color": "blue"}

    response = await client.get(f"/acls/panel/{panel['id']}", headers=auth_headers(ALICE))
    assert [(e["user_email"], e["permission"]) for e in response.json()] == [(ALICE, "owner")]


async def test_create_panel_requires_tenant(client, auth_headers):
    response = await client.post("/panels/", json={"name": "Intake"}, headers=auth_headers(ALICE, tenant_id=None))
    assert response.status_code == 401


async def test_list_panels_returns_shared_and_public_panels(client, auth_headers):
    own = await create_panel(client, auth_headers(ALICE), "Alice's")
    public = await create_panel(client, auth_headers(BOB), "Public")
    await create_panel(client, auth_headers(BOB), "Private")
    await client.post(
        f"/acls/panel/{public['id']}/share-public",
        json={"permission": "viewer"},
        headers=auth_headers(BOB),
    )

    response = await client.get("/panels/", headers=auth_headers(ALICE))

    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == [own["name"], public["name"]]


async def test_list_panels_is_tenant_scoped(client, auth_headers):
    await create_panel(client, auth_headers(ALICE))

    response = await client.get("/panels/", headers=auth_headers(ALICE, tenant_id="tenant-b"))
    assert response.json() == []


async def test_panel_of_other_tenant_is_forbidden(client, auth_headers):
    panel = await create_panel(client, auth_headers(ALICE))

    response = await client.get(f"/panels/{panel['id']}", headers=auth_headers(ALICE, tenant_id="tenant-b"))
    assert response.status_code == 403


async def test_update_requires_editor(client, auth_headers):
    panel = await create_panel(client, auth_headers(ALICE))
    await client.post(
        f"/acls/panel/{panel['id']}",
        json={"user_email": BOB, "permission": "viewer"},
        headers=auth_headers(ALICE),
    )

    response = await client.put(f"/panels/{panel['id']}", json={"name": "Mine"}, headers=auth_headers(BOB))
    assert response.status_code == 403

    response = await client.put(
        f"/panels/{panel['id']}",
        json={"name": "Renamed", "metadata": {"color": "red"}},
        headers=auth_headers(ALICE),
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["metadata"] == {"color": "red"}


async def test_delete_requires_owner(client, auth_headers):
    panel = await create_panel(client, auth_headers(ALICE))
    await client.post(
        f"/acls/panel/{panel['id']}",
        json={"user_email": BOB, "permission": "editor"},
        headers=auth_headers(ALICE),
    )

    response = await client.delete(f"/panels/{panel['id']}", headers=auth_headers(BOB))
    assert response.status_code == 403


async def test_delete_cascades_views_and_grants(client, auth_headers, db):
    panel = await create_panel(client, auth_headers(ALICE))
    view = (await client.post(
        f"/panels/{panel['id']}/views", json={"name": "Open"}, headers=auth_headers(ALICE)
    )).json()
    await client.post(
        f"/acls/view/{view['id']}",
        json={"user_email": BOB, "permission": "viewer"},
        headers=auth_headers(ALICE),
    )

    response = await client.delete(f"/panels/{panel['id']}", headers=auth_headers(ALICE))
    assert response.status_code == 204

    result = await db.execute(select(AccessControlList))
    assert result.scalars().all() == []

    response = await client.get(f"/views/{view['id']}", headers=auth_headers(ALICE))
    assert response.status_code == 403
    response = await client.get(f"/panels/{panel['id']}", headers=auth_headers(ALICE))
    assert response.status_code == 403


async def test_update_rejects_null_name(client, auth_headers):
    panel = await create_panel(client, auth_headers(ALICE))

    response = await client.put(f"/panels/{panel['id']}", json={"name": None}, headers=auth_headers(ALICE))
    assert response.status_code == 400
    assert "name" in response.json()

    response = await client.put(f"/panels/{panel['id']}", json={"description": None}, headers=auth_headers(ALICE))
    assert response.status_code == 200
    assert response.json()["name"] == panel["name"]
