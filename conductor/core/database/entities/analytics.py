"""
Analytics course entities.

An analytics course ties a LibreTexts textbook and/or an ADAPT course to a
roster so instructors can review learning analytics. Textbook links require
an access request to be approved before they become active.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now

COURSE_ROLES = ("instructor", "viewer")


class AnalyticsCourse(Base, table=True):
    """Table: analytics_courses"""

    __tablename__ = "analytics_courses"
    __table_args__ = ({"extend_existing": True},)

    course_id: str = Field(primary_key=True)
    title: str
    term: str
    start_date: datetime
    end_date: datetime
    status: str = Field(default="active", description="active | pending")
    types: List[str] = Field(default_factory=lambda: ["learning"], sa_type=JSON)
    creator: str = Field(index=True)
    instructors: List[str] = Field(default_factory=list, sa_type=JSON)
    viewers: List[str] = Field(default_factory=list, sa_type=JSON)
    students: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    textbook_url: Optional[str] = Field(default=None)
    textbook_id: Optional[str] = Field(default=None)
    pending_textbook_url: Optional[str] = Field(default=None)
    pending_textbook_id: Optional[str] = Field(default=None)
    textbook_denied: bool = Field(default=False)
    adapt_course_id: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def is_member(self, uuid: Optional[str]) -> bool:
        return bool(uuid) and (uuid in self.instructors or uuid in self.viewers)

    def is_instructor(self, uuid: Optional[str]) -> bool:
        return bool(uuid) and uuid in self.instructors

    def __repr__(self) -> str:
        return f"AnalyticsCourse(id={self.course_id}, title={self.title!r}, status={self.status})"


class AnalyticsAccessRequest(Base, table=True):
    """Table: analytics_access_requests"""

    __tablename__ = "analytics_access_requests"
    __table_args__ = ({"extend_existing": True},)

    request_id: str = Field(primary_key=True)
    requester: str
    course_id: str = Field(index=True)
    status: str = Field(default="open", index=True, description="open | approved | denied")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"AnalyticsAccessRequest(id={self.request_id}, course={self.course_id}, status={self.status})"
