"""
Book entity models.

A Book is a Commons catalog record for an OER textbook imported from one of
the LibreTexts libraries. Its identifier is the ``{library}-{coverPageID}``
composite key.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now

BOOK_LOCATIONS = ("central", "campus")


class BookBase(Base):
    """Base fields for a catalog book."""

    title: str = Field(description="Book title")
    author: str = Field(default="", description="Author display string")
    affiliation: str = Field(default="", description="Institution the book belongs to")
    library: str = Field(index=True, description="LibreTexts library key (e.g. 'chem')")
    subject: str = Field(default="", description="Bookshelf subject for central books")
    location: str = Field(default="central", description="'central' (Bookshelves) or 'campus' (Courses)")
    course: str = Field(default="", description="Campus course name for campus books")
    program: str = Field(default="", index=True, description="OER program the book belongs to")
    license: str = Field(default="", description="License identifier")
    thumbnail: str = Field(default="", description="Thumbnail image URL")
    summary: str = Field(default="", description="Short book summary")
    rating: float = Field(default=0, ge=0, le=5, description="Average peer review rating")
    links: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON, description="online/pdf/buy/zip/files/lms links")
    last_updated: Optional[str] = Field(default=None, description="Last modification timestamp from the library")
    library_tags: List[str] = Field(default_factory=list, sa_type=JSON, description="Raw tags from the library")
    reader_resources: List[Dict[str, Any]] = Field(
        default_factory=list, sa_type=JSON, description="Supplementary resources: [{name, url}]"
    )


class Book(BookBase, table=True):
    """Persistent catalog book.

    Table: books
    """

    __tablename__ = "books"
    __table_args__ = ({"extend_existing": True},)

    book_id: str = Field(primary_key=True, description="'{library}-{coverPageID}'")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def cover_page_id(self) -> str:
        return self.book_id.split("-", 1)[1] if "-" in self.book_id else ""

    def __repr__(self) -> str:
        return f"Book(id={self.book_id}, title={self.title!r})"
