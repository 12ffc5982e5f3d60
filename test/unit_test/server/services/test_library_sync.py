"""Unit tests for the Commons-Libraries sync."""

import httpx
import pytest

from conductor.core.database.entities import Book, Collection, Project
from conductor.core.errors import ConductorError
from conductor.server.services.library_sync import (
    LibrarySyncService,
    build_book,
    is_valid_import,
    process_listing,
)
from conductor.server.services.libretexts_client import LibreTextsClient


def _item(**kwargs) -> dict:
    item = {
        "zipFilename": "chem-55",
        "title": "Organic Chemistry",
        "id": 55,
        "author": "Dr. Smith",
        "institution": "UC Davis",
        "link": "https://chem.libretexts.org/Bookshelves/Organic_Chemistry/Book",
        "tags": ["license:ccby", "program:oer-ucd"],
        "lastModified": "2024-01-01T00:00:00",
    }
    item.update(kwargs)
    return item


class TestBuildBook:
    def test_central_book(self):
        book = build_book(_item())

        assert book.book_id == "chem-55"
        assert book.library == "chem"
        assert book.location == "central"
        assert book.subject == "Organic Chemistry"
        assert book.license == "ccby"
        assert book.program == "oer-ucd"
        assert book.links["pdf"].endswith("/chem-55/Full.pdf")
        assert book.links["buy"].endswith("?chem-55")
        assert book.thumbnail.startswith("https://chem.libretexts.org/@api/deki/pages/55/")

    def test_campus_book(self):
        book = build_book(_item(link="https://chem.libretexts.org/Courses/UC_Davis/CHE_2A"))

        assert book.location == "campus"
        assert book.course == "UC Davis"
        assert book.subject == ""

    def test_nocommons_tag_excludes_book(self):
        assert build_book(_item(tags=["coverpage:nocommons"])) is None


class TestProcessListing:
    def test_skips_invalid_and_duplicates(self):
        items = [
            _item(),
            _item(title="Duplicate"),
            _item(zipFilename="bio-1", title=""),
            _item(zipFilename="phys-2", id=None),
            _item(zipFilename="math-3", id=3, tags=["coverpage:nocommons"]),
            _item(zipFilename="math-4", id=4),
        ]

        books, skipped = process_listing(items)

        assert [b.book_id for b in books] == ["chem-55", "math-4"]
        assert books[0].title == "Organic Chemistry"
        assert skipped == 4

    def test_is_valid_import_needs_library_prefix(self):
        assert is_valid_import(_item(zipFilename="nolibrary")) is False


class TestLibrarySyncService:
    @pytest.fixture
    def listing_client(self, libretexts_config, mock_http_client):
        def _build(handler):
            return LibreTextsClient(libretexts_config, client=mock_http_client(handler))

        return _build

    async def test_sync_imports_and_prunes(self, session, listing_client):
        session.add_all(
            [
                Book(book_id="old-1", title="Gone", library="old"),
                Book(book_id="chem-55", title="Stale Title", library="chem", rating=4.0),
                Collection(coll_id="c1", org_id="libretexts", title="UCD OER", auto_manage=True, program="oer-ucd"),
            ]
        )
        await session.commit()

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/DownloadsCenter/chem/Bookshelves.json":
                return httpx.Response(200, json={"items": [_item()]})
            return httpx.Response(200, json={"items": []})

        service = LibrarySyncService(session, listing_client(handler), ["chem"])
        message = await service.sync()

        assert message == (
            "Imported 1 books from the Libraries. 1 system-managed Collections updated. "
            "1 new Projects were autogenerated."
        )
        assert await session.get(Book, "old-1") is None
        book = await session.get(Book, "chem-55")
        assert book.title == "Organic Chemistry"
        assert book.rating == 4.0
        collection = await session.get(Collection, "c1")
        assert collection.resources == [{"resourceType": "resource", "resourceID": "chem-55"}]

    async def test_sync_does_not_duplicate_projects(self, session, listing_client):
        session.add(Project(project_id="p1", org_id="libretexts", title="Existing", libre_library="chem", libre_cover_id="55"))
        await session.commit()

        service = LibrarySyncService(
            session, listing_client(lambda request: httpx.Response(200, json={"items": [_item()]})), ["chem"]
        )
        message = await service.sync()

        assert message.endswith("0 new Projects were autogenerated.")

    async def test_sync_api_unavailable(self, session, listing_client):
        service = LibrarySyncService(session, listing_client(lambda request: httpx.Response(500)), ["chem"])

        with pytest.raises(ConductorError) as exc_info:
            await service.sync()

        assert exc_info.value.code == "err16"
        assert exc_info.value.status_code == 503

    async def test_sync_without_books(self, session, listing_client):
        service = LibrarySyncService(
            session, listing_client(lambda request: httpx.Response(200, json={"items": []})), ["chem"]
        )

        with pytest.raises(ConductorError) as exc_info:
            await service.sync()

        assert exc_info.value.code == "err13"
