"""
Analytics course I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from .common import APIModel, ConductorResponse

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AnalyticsCourseCreate(APIModel):
    """Dates use the ``MM-DD-YYYY`` form."""

    title: str = Field(min_length=1, max_length=100)
    term: str = Field(min_length=1, max_length=100)
    start: str = Field(pattern=r"^\d{2}-\d{2}-\d{4}$")
    end: str = Field(pattern=r"^\d{2}-\d{2}-\d{4}$")
    textbook_url: Optional[str] = Field(default=None, alias="textbookURL")
    adapt_sharing_key: Optional[str] = Field(default=None, alias="adaptSharingKey")


class AnalyticsCourseUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    term: Optional[str] = Field(default=None, min_length=1, max_length=100)
    start: Optional[str] = Field(default=None, pattern=r"^\d{2}-\d{2}-\d{4}$")
    end: Optional[str] = Field(default=None, pattern=r"^\d{2}-\d{2}-\d{4}$")


class AnalyticsCourseRead(APIModel):
    course_id: str = Field(alias="courseID")
    title: str
    term: str
    start: datetime
    end: datetime
    status: str
    types: List[str] = Field(default_factory=list)
    textbook_url: Optional[str] = Field(default=None, alias="textbookURL")
    textbook_id: Optional[str] = Field(default=None, alias="textbookID")
    textbook_denied: bool = False
    adapt_course_id: Optional[str] = Field(default=None, alias="adaptCourseID")
    has_textbook: bool = False
    has_adapt: bool = Field(default=False, alias="hasADAPT")
    can_edit: Optional[bool] = None


class AnalyticsCourseResponse(ConductorResponse):
    course: AnalyticsCourseRead


class AnalyticsCourseListResponse(ConductorResponse):
    courses: List[AnalyticsCourseRead]


class AnalyticsCourseCreatedResponse(ConductorResponse):
    msg: str
    course_id: str = Field(alias="courseID")


class RosterStudent(APIModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=3, max_length=320, pattern=_EMAIL_PATTERN)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class RosterUpdate(APIModel):
    students: List[RosterStudent] = Field(min_length=1, max_length=1000)


class RosterResponse(ConductorResponse):
    course_id: str = Field(alias="courseID")
    students: List[RosterStudent]
    has_adapt: bool = Field(alias="hasADAPT")
    can_edit: bool


class CourseMember(APIModel):
    uuid: str
    role: Literal["instructor", "viewer"]
    creator: bool = False


class CourseMembersResponse(ConductorResponse):
    course_id: str = Field(alias="courseID")
    members: List[CourseMember]
    can_edit: bool


class MemberRoleUpdate(APIModel):
    role: Literal["instructor", "viewer"]


class AccessRequestRead(APIModel):
    request_id: str = Field(alias="requestID")
    requester: str
    course_id: str = Field(alias="courseID")
    status: str
    created_at: datetime
    pending_textbook_url: Optional[str] = Field(default=None, alias="pendingTextbookURL")


class AccessRequestListResponse(ConductorResponse):
    requests: List[AccessRequestRead]


class AccessRequestDecision(APIModel):
    verb: Literal["approve", "deny"]
