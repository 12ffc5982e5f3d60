import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities import Book, Collection

pytestmark = pytest.mark.asyncio

ADMIN = "libretexts:campusadmin"


async def test_create_collection_requires_campus_admin(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/collections", json={"title": "Chemistry"}, headers=auth_headers("u1"))

    assert response.status_code == 403


async def test_create_and_get_collection(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/v1/collections",
        json={"title": "  Chemistry  ", "privacy": "campus", "locations": ["central"]},
        headers=auth_headers("admin", ADMIN),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["msg"] == "Collection successfully created."
    coll_id = data["collID"]

    response = await client.get(f"/api/v1/collections/{coll_id}")
    assert response.status_code == 200
    collection = response.json()["collection"]
    assert collection["title"] == "Chemistry"
    assert collection["privacy"] == "campus"
    assert collection["orgID"] == "libretexts"
    assert collection["resourceCount"] == 0


async def test_get_collection_by_title(client: AsyncClient, session: AsyncSession):
    session.add(Collection(coll_id="c1", org_id="libretexts", title="Open Physics"))
    await session.commit()

    response = await client.get("/api/v1/collections/Open%20Physics")

    assert response.status_code == 200
    assert response.json()["collection"]["collID"] == "c1"


async def test_nested_collection_is_listed_in_parent(client: AsyncClient, session: AsyncSession, auth_headers):
    session.add(Collection(coll_id="parent", org_id="libretexts", title="Sciences"))
    await session.commit()

    response = await client.post(
        "/api/v1/collections",
        json={"title": "Physics", "parentID": "parent"},
        headers=auth_headers("admin", ADMIN),
    )
    child_id = response.json()["collID"]

    parent = await session.get(Collection, "parent")
    await session.refresh(parent)
    assert parent.resources == [{"resourceType": "collection", "resourceID": child_id}]

    response = await client.delete(f"/api/v1/collections/{child_id}", headers=auth_headers("admin", ADMIN))
    assert response.json()["msg"] == "Collection successfully deleted."
    await session.refresh(parent)
    assert parent.resources == []


async def test_edit_collection(client: AsyncClient, session: AsyncSession, auth_headers):
    session.add(Collection(coll_id="c1", org_id="libretexts", title="Old"))
    await session.commit()

    response = await client.put(
        "/api/v1/collections/c1", json={"title": "New"}, headers=auth_headers("admin", ADMIN)
    )
    assert response.json()["msg"] == "Collection successfully updated."

    response = await client.put("/api/v1/collections/c1", json={}, headers=auth_headers("admin", ADMIN))
    assert response.json()["msg"] == "No changes to save."


async def test_edit_missing_collection(client: AsyncClient, auth_headers):
    response = await client.put(
        "/api/v1/collections/missing", json={"title": "New"}, headers=auth_headers("admin", ADMIN)
    )

    assert response.status_code == 404


async def test_list_all_collections(client: AsyncClient, session: AsyncSession, auth_headers):
    session.add_all(
        [
            Collection(coll_id="a", org_id="libretexts", title="Zoology", privacy="private"),
            Collection(coll_id="b", org_id="libretexts", title="Anatomy"),
        ]
    )
    await session.commit()

    response = await client.get("/api/v1/collections/all", headers=auth_headers("admin", ADMIN))

    assert [c["title"] for c in response.json()["collections"]] == ["Anatomy", "Zoology"]


async def test_resources_add_list_and_remove(client: AsyncClient, session: AsyncSession, auth_headers):
    session.add_all(
        [
            Collection(coll_id="c1", org_id="libretexts", title="Chemistry"),
            Book(book_id="chem-2", title="Physical Chemistry", library="chem", author="B"),
            Book(book_id="chem-1", title="Analytical Chemistry", library="chem", author="A"),
        ]
    )
    await session.commit()

    response = await client.put(
        "/api/v1/collections/c1/resources",
        json={"books": ["chem-2", "chem-1", "chem-2"]},
        headers=auth_headers("admin", ADMIN),
    )
    assert response.status_code == 200

    response = await client.get("/api/v1/collections/c1/resources")
    data = response.json()
    assert data["totalItems"] == 2
    assert [r["resourceData"]["title"] for r in data["resources"]] == ["Analytical Chemistry", "Physical Chemistry"]

    response = await client.get("/api/v1/collections/c1/resources", params={"query": "physical"})
    assert [r["resourceID"] for r in response.json()["resources"]] == ["chem-2"]

    response = await client.delete("/api/v1/collections/c1/resources/chem-2", headers=auth_headers("admin", ADMIN))
    assert response.json()["msg"] == "Resource successfully removed from Collection."

    response = await client.get("/api/v1/collections/c1/resources")
    assert [r["resourceID"] for r in response.json()["resources"]] == ["chem-1"]


async def test_create_collection_validation_error(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/v1/collections", json={"title": "x", "privacy": "secret"}, headers=auth_headers("admin", ADMIN)
    )

    assert response.status_code == 400
    assert response.json()["errCode"] == "err1"
