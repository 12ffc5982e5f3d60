"""
Project entity models.

A Project is a book-authoring workspace. Projects linked to a library book
(``libre_library`` + ``libre_cover_id``) carry the book's peer reviews, its
ADAPT course link and its batch AI metadata jobs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now

PROJECT_STATUSES = ("available", "open", "completed", "flagged")
PROJECT_VISIBILITIES = ("public", "private")


class ProjectBase(Base):
    """Base fields for a project."""

    org_id: str = Field(index=True, description="Owning organization")
    title: str = Field(description="Project title")
    status: str = Field(default="open", description="available | open | completed | flagged")
    visibility: str = Field(default="private", description="public | private")
    leads: List[str] = Field(default_factory=list, sa_type=JSON)
    liaisons: List[str] = Field(default_factory=list, sa_type=JSON)
    members: List[str] = Field(default_factory=list, sa_type=JSON)
    auditors: List[str] = Field(default_factory=list, sa_type=JSON)
    libre_library: Optional[str] = Field(default=None, index=True)
    libre_cover_id: Optional[str] = Field(default=None, index=True)
    author: Optional[str] = Field(default=None)
    license: Optional[str] = Field(default=None)
    project_url: Optional[str] = Field(default=None)
    adapt_course_id: Optional[str] = Field(default=None)
    rating: float = Field(default=0, ge=0, le=5)
    allow_anon_pr: bool = Field(default=True, description="Allow peer reviews from outside the team")
    preferred_pr_rubric: Optional[str] = Field(default=None)
    cid_descriptors: List[str] = Field(default_factory=list, sa_type=JSON)


class Project(ProjectBase, table=True):
    """Table: projects"""

    __tablename__ = "projects"
    __table_args__ = ({"extend_existing": True},)

    project_id: str = Field(primary_key=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def book_id(self) -> Optional[str]:
        if self.libre_library and self.libre_cover_id:
            return f"{self.libre_library}-{self.libre_cover_id}"
        return None

    @property
    def team(self) -> List[str]:
        return [*self.leads, *self.liaisons, *self.members]

    def __repr__(self) -> str:
        return f"Project(id={self.project_id}, title={self.title!r})"


class BatchUpdateJob(Base, table=True):
    """A batch AI metadata job run against a project's book.

    Status flows pending -> running -> completed | failed.

    Table: batch_update_jobs
    """

    __tablename__ = "batch_update_jobs"
    __table_args__ = ({"extend_existing": True},)

    job_id: str = Field(primary_key=True)
    project_id: str = Field(index=True)
    type: List[str] = Field(default_factory=list, sa_type=JSON, description="summaries and/or tags")
    status: str = Field(default="pending", index=True)
    data_source: str = Field(default="generated", description="generated | user")
    generate_resources: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    ran_by: Optional[str] = Field(default=None)
    start_timestamp: datetime = Field(default_factory=utc_now)
    end_timestamp: Optional[datetime] = Field(default=None)
    meta_results: Dict[str, int] = Field(default_factory=dict, sa_type=JSON)
    successful_meta_pages: int = Field(default=0)
    failed_meta_pages: int = Field(default=0)
    error: Optional[str] = Field(default=None)
    logs: List[str] = Field(default_factory=list, sa_type=JSON)

    def __repr__(self) -> str:
        return f"BatchUpdateJob(id={self.job_id}, project={self.project_id}, status={self.status})"
