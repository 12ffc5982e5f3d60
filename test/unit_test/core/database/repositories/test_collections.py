"""Unit tests for CollectionRepository."""

import pytest
import pytest_asyncio

from conductor.core.database.entities import Collection
from conductor.core.database.repositories import CollectionRepository


@pytest.fixture
def repo(in_memory_session) -> CollectionRepository:
    return CollectionRepository(in_memory_session)


def _collection(coll_id: str, title: str, **kwargs) -> Collection:
    values = dict(org_id="libretexts")
    values.update(kwargs)
    return Collection(coll_id=coll_id, title=title, **values)


@pytest_asyncio.fixture
async def seeded(repo):
    for coll in (
        _collection("c1", "Biology", program="bio-program"),
        _collection("c2", "Astronomy", privacy="private"),
        _collection("c3", "Chemistry", auto_manage=True, program="openstax"),
        _collection("c4", "Child", parent_id="c1"),
        _collection("c5", "Elsewhere", org_id="ucd"),
    ):
        await repo.create(coll)
    return repo


class TestCollectionRepository:
    async def test_get_by_id_or_title(self, seeded):
        assert (await seeded.get_by_id_or_title("c2")).title == "Astronomy"
        assert (await seeded.get_by_id_or_title("Chemistry")).coll_id == "c3"
        assert await seeded.get_by_id_or_title("missing") is None

    async def test_list_root_sorted_by_title(self, seeded):
        roots = await seeded.list_root("libretexts")

        assert [c.coll_id for c in roots] == ["c2", "c1", "c3"]
        assert await seeded.count_root("libretexts") == 3

    async def test_list_root_filters(self, seeded):
        public = await seeded.list_root("libretexts", privacy="public", descending=True)
        matched = await seeded.list_root("libretexts", query="BIO")

        assert [c.coll_id for c in public] == ["c3", "c1"]
        assert [c.coll_id for c in matched] == ["c1"]
        assert await seeded.count_root("libretexts", privacy="private") == 1

    async def test_list_root_paging_and_unknown_sort(self, seeded):
        page = await seeded.list_root("libretexts", sort="nope", limit=1, offset=1)

        assert [c.coll_id for c in page] == ["c1"]

    async def test_list_auto_managed(self, seeded):
        assert [c.coll_id for c in await seeded.list_auto_managed()] == ["c3"]

    async def test_list_containing(self, seeded):
        parent = await seeded.get_by_id("c1")
        parent.resources = [{"resourceType": "resource", "resourceID": "chem-1"}]
        await seeded.update(parent)

        found = await seeded.list_containing("chem-1")

        assert [c.coll_id for c in found] == ["c1"]
        assert parent.has_resource("chem-1")
        assert not parent.has_resource("chem-2")
