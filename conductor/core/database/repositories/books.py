"""
Book repository.

Data access for the Commons catalog, including the bulk upsert and prune
operations used by the library sync.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from sqlalchemy import delete as sa_delete
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.books import Book
from .base import AsyncSQLModelRepository

SEARCHABLE_FIELDS = ("title", "author", "affiliation", "subject", "course", "program", "summary")


class BookRepository(AsyncSQLModelRepository[Book]):
    """Repository for catalog books."""

    id_field = "book_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Book)

    async def search(self, query: Optional[str] = None) -> List[Book]:
        """All books, optionally filtered by a case-insensitive substring match.

        Args:
            query: Text matched against title, author, affiliation, subject,
                course, program and summary

        Returns:
            Matching books in no particular order
        """
        stmt = select(Book)
        if query:
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(or_(*(getattr(Book, field).ilike(pattern) for field in SEARCHABLE_FIELDS)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_institution(self, book_ids: Sequence[str], institution_names: Sequence[str]) -> List[Book]:
        """Books hand-picked by id or published by/for one of the institution names."""
        conditions = []
        if book_ids:
            conditions.append(Book.book_id.in_(list(book_ids)))
        if institution_names:
            conditions.append(Book.affiliation.in_(list(institution_names)))
            conditions.append(Book.course.in_(list(institution_names)))
        if not conditions:
            return []
        result = await self.session.execute(select(Book).where(or_(*conditions)))
        return list(result.scalars().all())

    async def list_with_any_tag(self, tags: Iterable[str]) -> List[Book]:
        """Books carrying at least one of ``tags`` in their library tags."""
        wanted = set(tags)
        if not wanted:
            return []
        books = await self.search()
        return [book for book in books if wanted.intersection(book.library_tags or [])]

    async def list_by_program(self, program: str, locations: Sequence[str]) -> List[Book]:
        stmt = select(Book).where(Book.program == program)
        if locations:
            stmt = stmt.where(Book.location.in_(list(locations)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def upsert_many(self, books: Sequence[Book]) -> int:
        """Insert or update books by their identifier.

        Existing rows keep their peer review rating and reader resources.

        Returns:
            Number of books written
        """
        existing = {book.book_id: book for book in await self.get_many([b.book_id for b in books])}
        for incoming in books:
            current = existing.get(incoming.book_id)
            if current is None:
                self.session.add(incoming)
                continue
            for field in Book.model_fields:
                if field in ("book_id", "rating", "reader_resources", "created_at", "updated_at"):
                    continue
                setattr(current, field, getattr(incoming, field))
            self.session.add(current)
        await self.session.commit()
        return len(books)

    async def delete_not_in(self, keep_ids: Sequence[str]) -> int:
        """Delete every book whose identifier is not in ``keep_ids``.

        Returns:
            Number of books removed
        """
        stmt = sa_delete(Book)
        if keep_ids:
            stmt = stmt.where(Book.book_id.not_in(list(keep_ids)))
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0
