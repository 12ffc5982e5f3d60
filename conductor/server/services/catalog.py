"""
Commons catalog service.

Builds the instance catalog (project-linked books plus, on campus instances,
books matched by the custom catalog, library tags or institution names), the
master catalog, filter options and single-book views.
"""

from __future__ import annotations

import random
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.books import Book
from conductor.core.database.entities.organizations import Organization
from conductor.core.database.repositories import (
    AdoptionReportRepository,
    BookRepository,
    CIDDescriptorRepository,
    CollectionRepository,
    CustomCatalogRepository,
    OrganizationRepository,
    PeerReviewRepository,
    ProjectRepository,
)
from conductor.core.errors import bad_request, not_found
from conductor.core.logging_config import get_logger
from conductor.core.models.io.books import BookDetail, BookRead, FilterOption, ReaderResource
from conductor.core.models.io.peer_reviews import PeerReviewRead
from conductor.core.utils import normalized_sort_key, sort_books
from conductor.server.core.config import settings
from conductor.server.core.constant import LIBRETEXTS_ORG_ID

logger = get_logger(__name__)

BOOK_ID_PATTERN = re.compile(r"^[a-z0-9]+-\d+$")
_NAME_PUNCTUATION = re.compile(r"[,\-:']")


def validate_book_id(book_id: str) -> str:
    if not book_id or not BOOK_ID_PATTERN.match(book_id):
        raise bad_request("err1")
    return book_id


def build_organization_names(org: Optional[Organization]) -> List[str]:
    """All spellings an organization's books may be labelled with.

    Includes the name, short name, abbreviation and aliases, each variant
    again with commas, hyphens, colons and apostrophes removed, and the
    lower-case form of everything collected so far.
    """
    if org is None:
        return []
    names: List[str] = [org.name]
    if org.short_name:
        names.append(org.short_name)
    if org.abbreviation:
        names.append(org.abbreviation)
    names.extend(alias for alias in (org.aliases or []) if alias)
    stripped = [_NAME_PUNCTUATION.sub("", name) for name in names if _NAME_PUNCTUATION.search(name)]
    names.extend(stripped)
    names.extend([name.lower() for name in names])
    return list(dict.fromkeys(name for name in names if name))


def random_offset(total: int, limit: int) -> int:
    """A random start index so that a ``limit``-sized window stays inside ``total``."""
    return random.randint(0, max(total - limit, 0))


def dedupe_books(books: Iterable[Book]) -> List[Book]:
    seen: Dict[str, Book] = {}
    for book in books:
        seen.setdefault(book.book_id, book)
    return list(seen.values())


def is_campus_book(book: Book, campus_names: Sequence[str]) -> bool:
    """Whether a book belongs to the campus: course, then program, then affiliation."""
    if not campus_names:
        return False
    for value in (book.course, book.program, book.affiliation):
        if value:
            return any(name in value for name in campus_names)
    return False


class CatalogService:
    """Read and maintenance operations on the Commons catalog."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.books = BookRepository(session)
        self.projects = ProjectRepository(session)
        self.orgs = OrganizationRepository(session)
        self.custom_catalogs = CustomCatalogRepository(session)
        self.peer_reviews = PeerReviewRepository(session)
        self.collections = CollectionRepository(session)
        self.adoption_reports = AdoptionReportRepository(session)
        self.cids = CIDDescriptorRepository(session)

    async def _campus_context(self) -> Tuple[Optional[Organization], List[str], List[str]]:
        """The instance organization, its name variants and custom catalog entries."""
        if settings.org_id == LIBRETEXTS_ORG_ID:
            return None, [], []
        org = await self.orgs.get_by_id(settings.org_id)
        custom = await self.custom_catalogs.get_by_id(settings.org_id)
        return org, build_organization_names(org), list(custom.resources) if custom else []

    async def get_commons_catalog(self, limit: int = 10, sort: Optional[str] = None) -> Tuple[int, List[BookRead]]:
        """The instance catalog as a random window of ``limit`` books.

        Returns:
            Total number of catalog books and the selected window
        """
        linked = await self.projects.list_with_linked_books(settings.org_id)
        project_books = await self.books.get_many([p.book_id for p in linked if p.book_id])
        if sort in ("author", "title"):
            project_books = sort_books(project_books, sort)

        campus_books: List[Book] = []
        org, campus_names, custom_ids = await self._campus_context()
        if org is not None:
            tags = list(org.catalog_matching_tags or [])
            campus_books = await self.books.list_by_institution(custom_ids, campus_names)
            if tags:
                campus_books.extend(await self.books.list_with_any_tag(tags))

        books = dedupe_books([*project_books, *campus_books])
        total = len(books)
        offset = random_offset(total, limit)
        window = books[offset : min(offset + limit, total)]
        logger.debug(f"Commons catalog: total={total}, offset={offset}, returned={len(window)}")
        return total, [BookRead.model_validate(book) for book in window]

    async def get_master_catalog(self, sort: str = "title", search: Optional[str] = None) -> List[BookRead]:
        books = sort_books(await self.books.search(search), sort)
        if settings.org_id == LIBRETEXTS_ORG_ID:
            return [BookRead.model_validate(book) for book in books]

        _, campus_names, custom_ids = await self._campus_context()

        custom = set(custom_ids)
        return [
            BookRead.model_validate(book).model_copy(
                update={
                    "is_custom_enabled": book.book_id in custom,
                    "is_campus_book": is_campus_book(book, campus_names),
                }
            )
            for book in books
        ]

    async def get_filters(self) -> Dict[str, list]:
        """Unique values for every catalog filter, plus the C-ID options."""
        books = await self.books.search()

        def _unique(values: Iterable[Optional[str]]) -> List[str]:
            return sorted({v for v in values if v}, key=normalized_sort_key)

        descriptors = await self.cids.search()
        return {
            "authors": _unique(book.author for book in books),
            "subjects": _unique(book.subject for book in books),
            "affiliations": _unique(book.affiliation for book in books),
            "courses": _unique(book.course for book in books),
            "programs": _unique(book.program for book in books),
            "cids": [
                FilterOption(key=d.descriptor, value=d.descriptor, text=f"{d.descriptor}: {d.title}")
                for d in descriptors
            ],
        }

    async def get_book(self, book_id: str) -> BookDetail:
        validate_book_id(book_id)
        book = await self.books.get_by_id(book_id)
        if book is None:
            raise not_found()

        detail = BookDetail.model_validate(book).model_copy(
            update={"has_reader_resources": bool(book.reader_resources)}
        )
        project = await self.projects.get_by_book_id(book_id)
        if project is None:
            return detail

        reviews = await self.peer_reviews.list_for_project(project.project_id)
        return detail.model_copy(
            update={
                "project_id": project.project_id,
                "allow_anon_pr": project.visibility == "public" and project.allow_anon_pr,
                "has_peer_reviews": bool(reviews),
                "has_adapt_course": bool(project.adapt_course_id),
                "adapt_course_id": project.adapt_course_id,
            }
        )

    async def get_book_peer_reviews(self, book_id: str) -> Dict[str, object]:
        validate_book_id(book_id)
        project = await self.projects.get_by_book_id(book_id)
        if project is None:
            return {"project_id": None, "reviews": [], "allows_anon": False}
        reviews = await self.peer_reviews.list_for_project(project.project_id)
        return {
            "project_id": project.project_id,
            "reviews": [PeerReviewRead.model_validate(review) for review in reviews],
            "allows_anon": project.visibility == "public" and project.allow_anon_pr,
        }

    async def delete_book(self, book_id: str) -> None:
        """Remove a book and everything that references it."""
        validate_book_id(book_id)
        book = await self.books.get_by_id(book_id)
        if book is None:
            raise not_found()

        project = await self.projects.get_by_book_id(book_id)
        if project is not None:
            await self.peer_reviews.delete_for_project(project.project_id)
            await self.projects.delete(project.project_id)

        removed_reports = await self.adoption_reports.delete_for_resource(book_id)
        for collection in await self.collections.list_containing(book_id):
            collection.resources = [r for r in collection.resources if r.get("resourceID") != book_id]
            await self.collections.update(collection)

        await self.books.delete(book_id)
        logger.info(
            f"Deleted book {book_id} (project={project.project_id if project else None}, "
            f"adoption_reports={removed_reports})"
        )

    async def update_reader_resources(self, book_id: str, resources: Sequence[ReaderResource]) -> BookDetail:
        validate_book_id(book_id)
        book = await self.books.get_by_id(book_id)
        if book is None:
            raise not_found()
        book.reader_resources = [{"name": r.name.strip(), "url": r.url.strip()} for r in resources]
        await self.books.update(book)
        return await self.get_book(book_id)
