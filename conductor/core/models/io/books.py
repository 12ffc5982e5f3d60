"""
Commons catalog I/O models.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from .common import APIModel, ConductorResponse
from .peer_reviews import PeerReviewRead


class ReaderResource(APIModel):
    """A supplementary resource shown with a book."""

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)


class BookRead(APIModel):
    """Schema for reading a catalog book."""

    book_id: str = Field(alias="bookID")
    title: str
    author: str = ""
    affiliation: str = ""
    library: str
    subject: str = ""
    location: str = "central"
    course: str = ""
    program: str = ""
    license: str = ""
    thumbnail: str = ""
    summary: str = ""
    rating: float = 0
    links: Dict[str, Any] = Field(default_factory=dict)
    last_updated: Optional[str] = None
    library_tags: List[str] = Field(default_factory=list)
    reader_resources: List[ReaderResource] = Field(default_factory=list)
    is_custom_enabled: Optional[bool] = Field(default=None, description="Set on campus instances only")
    is_campus_book: Optional[bool] = Field(default=None, description="Set on campus instances only")


class BookDetail(BookRead):
    """A book together with its linked project's review and course settings."""

    project_id: Optional[str] = Field(default=None, alias="projectID")
    has_reader_resources: bool = False
    allow_anon_pr: bool = Field(default=False, alias="allowAnonPR")
    has_peer_reviews: bool = False
    has_adapt_course: bool = Field(default=False, alias="hasAdaptCourse")
    adapt_course_id: Optional[str] = Field(default=None, alias="adaptCourseID")


class CatalogResponse(ConductorResponse):
    num_total: int
    books: List[BookRead]


class MasterCatalogResponse(ConductorResponse):
    books: List[BookRead]


class FilterOption(APIModel):
    key: str
    value: str
    text: str


class CatalogFiltersResponse(ConductorResponse):
    authors: List[str]
    subjects: List[str]
    affiliations: List[str]
    courses: List[str]
    programs: List[str]
    cids: List[FilterOption]


class BookResponse(ConductorResponse):
    book: BookDetail


class ReaderResourcesUpdate(APIModel):
    reader_resources: List[ReaderResource]


class BookPeerReviewsResponse(ConductorResponse):
    project_id: Optional[str] = Field(default=None, alias="projectID")
    reviews: List[PeerReviewRead]
    allows_anon: bool = False
