"""
Commons-Libraries sync.

Imports every book listed by the configured libraries' DownloadsCenter into
the catalog, prunes books that disappeared, creates a project for each new
book and refreshes the system-managed collections.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.books import Book
from conductor.core.database.entities.projects import Project
from conductor.core.database.repositories import BookRepository, CollectionRepository, ProjectRepository
from conductor.core.errors import internal_error, service_unavailable
from conductor.core.logging_config import get_logger
from conductor.core.utils import generate_b62_id
from conductor.server.core.constant import LIBRETEXTS_ORG_ID

from .libretexts_client import LibreTextsApiError, LibreTextsClient

logger = get_logger(__name__)

LISTING_KINDS = ("Bookshelves", "Courses")
NO_COMMONS_TAG = "coverpage:nocommons"
BATCH_EXPORT_URL = "https://batch.libretexts.org/print/Letter/Finished"
BOOKSTORE_URL = "https://libretexts.org/bookstore/single.html"


# ---------------------------------------------------------------------------
# Link generators
# ---------------------------------------------------------------------------


def thumbnail_link(library: str, page_id: str) -> str:
    return f"https://{library}.libretexts.org/@api/deki/pages/{page_id}/files/=mindtouch.page%2523thumbnail"


def pdf_link(book_id: str) -> str:
    return f"{BATCH_EXPORT_URL}/{book_id}/Full.pdf"


def buy_link(book_id: str) -> str:
    return f"{BOOKSTORE_URL}?{book_id}"


def zip_link(book_id: str) -> str:
    return f"{BATCH_EXPORT_URL}/{book_id}/Individual.zip"


def files_link(book_id: str) -> str:
    return f"{BATCH_EXPORT_URL}/{book_id}/Publication.zip"


def lms_link(book_id: str) -> str:
    return f"{BATCH_EXPORT_URL}/{book_id}/LibreText.imscc"


# ---------------------------------------------------------------------------
# Item processing
# ---------------------------------------------------------------------------


def extract_library(book_id: str) -> str:
    return book_id.split("-", 1)[0] if "-" in book_id else ""


def is_valid_import(item: Dict[str, Any]) -> bool:
    """A listing item is importable when it has a book id, a title, a library and a page id."""
    book_id = str(item.get("zipFilename") or "")
    return bool(book_id and item.get("title") and extract_library(book_id) and item.get("id"))


def _path_segment_after(link: str, marker: str) -> str:
    """First path segment after ``marker`` in ``link``, underscores turned into spaces."""
    _, _, rest = link.partition(marker)
    return rest.split("/", 1)[0].replace("_", " ") if rest else ""


def build_book(item: Dict[str, Any]) -> Optional[Book]:
    """Turn a DownloadsCenter listing item into a catalog book, or None if it is excluded."""
    tags = [str(tag) for tag in (item.get("tags") or [])]
    if NO_COMMONS_TAG in tags:
        return None

    book_id = str(item["zipFilename"])
    library = extract_library(book_id)
    page_id = str(item["id"])
    link = str(item.get("link") or "")

    license_name = ""
    program = ""
    for tag in tags:
        if tag.startswith("license:"):
            license_name = tag[len("license:") :]
        elif tag.startswith("program:"):
            program = tag[len("program:") :]

    location, subject, course = "central", "", ""
    if "/Bookshelves/" in link:
        subject = _path_segment_after(link, "/Bookshelves/")
    elif "/Courses/" in link:
        location = "campus"
        course = _path_segment_after(link, "/Courses/")

    return Book(
        book_id=book_id,
        title=str(item["title"]),
        author=str(item.get("author") or ""),
        affiliation=str(item.get("institution") or ""),
        library=library,
        subject=subject,
        location=location,
        course=course,
        program=program,
        license=license_name,
        thumbnail=thumbnail_link(library, page_id),
        summary=str(item.get("summary") or ""),
        links={
            "online": link,
            "pdf": pdf_link(book_id),
            "buy": buy_link(book_id),
            "zip": zip_link(book_id),
            "files": files_link(book_id),
            "lms": lms_link(book_id),
        },
        last_updated=str(item["lastModified"]) if item.get("lastModified") else None,
        library_tags=tags,
    )


def process_listing(items: List[Dict[str, Any]]) -> Tuple[List[Book], int]:
    """Validate, dedupe and convert listing items.

    Returns:
        The books to import and the number of items skipped
    """
    books: Dict[str, Book] = {}
    skipped = 0
    for item in items:
        if not is_valid_import(item) or str(item["zipFilename"]) in books:
            skipped += 1
            continue
        book = build_book(item)
        if book is None:
            skipped += 1
            continue
        books[book.book_id] = book
    return list(books.values()), skipped


def new_project_for(book: Book) -> Project:
    return Project(
        project_id=generate_b62_id(10),
        org_id=LIBRETEXTS_ORG_ID,
        title=book.title,
        status="completed",
        visibility="public",
        libre_library=book.library,
        libre_cover_id=book.cover_page_id,
        project_url=book.links.get("online") or None,
        author=book.author or None,
        license=book.license or None,
    )


class LibrarySyncService:
    """Runs the Commons-Libraries sync."""

    def __init__(self, session: AsyncSession, client: LibreTextsClient, libraries: List[str]) -> None:
        self.session = session
        self.client = client
        self.libraries = libraries
        self.books = BookRepository(session)
        self.projects = ProjectRepository(session)
        self.collections = CollectionRepository(session)

    async def fetch_items(self) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        for library in self.libraries:
            for kind in LISTING_KINDS:
                items.extend(await self.client.get_library_listing(library, kind))
        return items

    async def auto_generate_collections(self) -> int:
        """Add matching program books to every auto-managed collection.

        Returns:
            Number of collections that gained entries
        """
        updated = 0
        for collection in await self.collections.list_auto_managed():
            books = await self.books.list_by_program(collection.program, collection.locations)
            additions = [
                {"resourceType": "resource", "resourceID": book.book_id}
                for book in books
                if not collection.has_resource(book.book_id)
            ]
            if not additions:
                continue
            collection.resources = [*collection.resources, *additions]
            await self.collections.update(collection)
            updated += 1
        return updated

    async def sync(self) -> str:
        try:
            items = await self.fetch_items()
        except LibreTextsApiError as exc:
            logger.error(f"Commons-Libraries sync could not reach the library API: {exc}")
            raise service_unavailable("err16") from exc

        books, skipped = process_listing(items)
        if not books:
            logger.error("Commons-Libraries sync found no importable books")
            raise internal_error("err13")

        try:
            imported = await self.books.upsert_many(books)
            removed = await self.books.delete_not_in([book.book_id for book in books])

            linked = await self.projects.list_linked_book_keys()
            new_projects = [
                new_project_for(book) for book in books if (book.library, book.cover_page_id) not in linked
            ]
            created = await self.projects.create_many(new_projects)
            collections_updated = await self.auto_generate_collections()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error(f"Commons-Libraries sync failed writing to the database: {exc}", exc_info=True)
            raise internal_error("err13") from exc

        logger.info(
            f"Commons-Libraries sync: imported={imported}, skipped={skipped}, removed={removed}, "
            f"projects_created={created}, collections_updated={collections_updated}"
        )
        return (
            f"Imported {imported} books from the Libraries. "
            f"{collections_updated} system-managed Collections updated. "
            f"{created} new Projects were autogenerated."
        )
