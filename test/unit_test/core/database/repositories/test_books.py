"""Unit tests for BookRepository."""

import pytest

from conductor.core.database.entities import Book
from conductor.core.database.repositories import BookRepository


@pytest.fixture
def repo(in_memory_session) -> BookRepository:
    return BookRepository(in_memory_session)


def _book(book_id: str, **kwargs) -> Book:
    values = dict(title=f"Book {book_id}", library=book_id.split("-")[0])
    values.update(kwargs)
    return Book(book_id=book_id, **values)


class TestBookRepositoryCrud:
    async def test_create_and_get(self, repo):
        await repo.create(_book("chem-1", author="Amy"))

        book = await repo.get_by_id("chem-1")

        assert book.author == "Amy"
        assert book.cover_page_id == "1"

    async def test_get_missing_returns_none(self, repo):
        assert await repo.get_by_id("chem-404") is None

    async def test_delete(self, repo):
        await repo.create(_book("chem-1"))

        assert await repo.delete("chem-1") is True
        assert await repo.delete("chem-1") is False

    async def test_list_with_filters_and_pagination(self, repo):
        for book in (_book("chem-1"), _book("chem-2"), _book("bio-3")):
            await repo.create(book)

        chem = await repo.list(filters={"library": "chem", "unknown": "x"})
        page = await repo.list(limit=1, offset=1)

        assert {b.book_id for b in chem} == {"chem-1", "chem-2"}
        assert len(page) == 1

    async def test_get_many(self, repo):
        for book in (_book("chem-1"), _book("chem-2")):
            await repo.create(book)

        assert {b.book_id for b in await repo.get_many(["chem-2", "bio-9"])} == {"chem-2"}
        assert await repo.get_many([]) == []


class TestBookRepositoryQueries:
    async def test_search_matches_fields_case_insensitively(self, repo):
        await repo.create(_book("chem-1", title="Organic Chemistry"))
        await repo.create(_book("bio-2", affiliation="Chemeketa Community College"))
        await repo.create(_book("math-3", title="Calculus"))

        found = await repo.search("CHEME")

        assert {b.book_id for b in found} == {"bio-2"}
        assert len(await repo.search("chem")) == 2
        assert len(await repo.search()) == 3

    async def test_list_by_institution(self, repo):
        await repo.create(_book("chem-1", affiliation="UC Davis"))
        await repo.create(_book("bio-2", course="UC Davis"))
        await repo.create(_book("math-3"))
        await repo.create(_book("eng-4"))

        found = await repo.list_by_institution(["eng-4"], ["UC Davis"])

        assert {b.book_id for b in found} == {"chem-1", "bio-2", "eng-4"}
        assert await repo.list_by_institution([], []) == []

    async def test_list_with_any_tag(self, repo):
        await repo.create(_book("chem-1", library_tags=["program:openstax"]))
        await repo.create(_book("bio-2", library_tags=["coverpage:yes"]))

        found = await repo.list_with_any_tag(["program:openstax", "program:other"])

        assert [b.book_id for b in found] == ["chem-1"]
        assert await repo.list_with_any_tag([]) == []

    async def test_list_by_program_and_location(self, repo):
        await repo.create(_book("chem-1", program="openstax", location="central"))
        await repo.create(_book("chem-2", program="openstax", location="campus"))

        assert len(await repo.list_by_program("openstax", [])) == 2
        assert [b.book_id for b in await repo.list_by_program("openstax", ["campus"])] == ["chem-2"]


class TestBookRepositorySync:
    async def test_upsert_keeps_rating_and_reader_resources(self, repo):
        await repo.create(_book("chem-1", title="Old", rating=4.5, reader_resources=[{"name": "Slides"}]))

        written = await repo.upsert_many([_book("chem-1", title="New"), _book("chem-2")])

        book = await repo.get_by_id("chem-1")
        assert written == 2
        assert book.title == "New"
        assert book.rating == 4.5
        assert book.reader_resources == [{"name": "Slides"}]
        assert await repo.get_by_id("chem-2") is not None

    async def test_delete_not_in(self, repo):
        for book in (_book("chem-1"), _book("chem-2"), _book("bio-3")):
            await repo.create(book)

        removed = await repo.delete_not_in(["chem-1"])

        assert removed == 2
        assert [b.book_id for b in await repo.list()] == ["chem-1"]
