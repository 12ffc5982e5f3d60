"""Unit tests for CIDDescriptorRepository."""

from datetime import datetime

import pytest

from conductor.core.database.entities import CIDDescriptor
from conductor.core.database.repositories import CIDDescriptorRepository


@pytest.fixture
def repo(in_memory_session) -> CIDDescriptorRepository:
    return CIDDescriptorRepository(in_memory_session)


class TestCIDDescriptorRepository:
    async def test_search_sorted_by_code(self, repo):
        await repo.upsert_many(
            [
                CIDDescriptor(descriptor="MATH 210", title="Calculus I"),
                CIDDescriptor(descriptor="CHEM 101", title="General Chemistry"),
                CIDDescriptor(descriptor="BIOL 110", title="Biology for Majors"),
            ]
        )

        assert [d.descriptor for d in await repo.search()] == ["BIOL 110", "CHEM 101", "MATH 210"]
        assert [d.descriptor for d in await repo.search("calculus")] == ["MATH 210"]
        assert [d.descriptor for d in await repo.search("chem")] == ["CHEM 101"]

    async def test_upsert_updates_existing(self, repo):
        await repo.upsert_many([CIDDescriptor(descriptor="MATH 210", title="Old")])

        await repo.upsert_many(
            [CIDDescriptor(descriptor="MATH 210", title="Calculus I", approved=datetime(2020, 5, 1))]
        )

        stored = await repo.get_by_id("MATH 210")
        assert stored.title == "Calculus I"
        assert stored.approved == datetime(2020, 5, 1)
        assert len(await repo.list()) == 1
