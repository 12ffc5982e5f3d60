"""
Analytics courses service.

A course is connected to a LibreTexts textbook (pending until an administrator
approves the access request), to an ADAPT course through its analytics
sharing key, or to both. Instructors edit the course and its roster; viewers
may only read.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.analytics import AnalyticsAccessRequest, AnalyticsCourse
from conductor.core.database.repositories import AnalyticsAccessRequestRepository, AnalyticsCourseRepository
from conductor.core.errors import bad_request, not_found, unauthorized
from conductor.core.logging_config import get_logger
from conductor.core.models.io.analytics import (
    AccessRequestRead,
    AnalyticsCourseCreate,
    AnalyticsCourseRead,
    AnalyticsCourseUpdate,
    CourseMember,
    RosterStudent,
)
from conductor.core.utils import generate_b62_id, normalized_sort_key
from conductor.server.core.deps import ActingUser

from .libretexts_client import AdaptClient, LibreTextsApiError, LibreTextsClient

logger = get_logger(__name__)

COVERPAGE_TAGS = ("coverpage:yes", "coverpage:toc")
ROSTER_SORT_FIELDS = {"firstName": "first_name", "lastName": "last_name", "email": "email"}
_DATE_FORMAT = "%m-%d-%Y"


def parse_course_dates(start: str, end: str) -> Tuple[datetime, datetime]:
    """Start is the beginning of its day, end the last millisecond of its day."""
    try:
        start_date = datetime.strptime(start, _DATE_FORMAT)
        end_date = datetime.strptime(end, _DATE_FORMAT) + timedelta(hours=23, minutes=59, seconds=59, milliseconds=999)
    except ValueError as exc:
        raise bad_request("err1") from exc
    if end_date < start_date:
        raise bad_request("err78")
    return start_date, end_date


def to_read(course: AnalyticsCourse, user: Optional[ActingUser] = None) -> AnalyticsCourseRead:
    return AnalyticsCourseRead(
        course_id=course.course_id,
        title=course.title,
        term=course.term,
        start=course.start_date,
        end=course.end_date,
        status=course.status,
        types=list(course.types),
        textbook_url=course.textbook_url,
        textbook_id=course.textbook_id,
        textbook_denied=course.textbook_denied,
        adapt_course_id=course.adapt_course_id,
        has_textbook=bool(course.textbook_id),
        has_adapt=bool(course.adapt_course_id),
        can_edit=course.is_instructor(user.uuid) if user else None,
    )


class AnalyticsService:
    def __init__(self, session: AsyncSession) -> None:
        self.courses = AnalyticsCourseRepository(session)
        self.requests = AnalyticsAccessRequestRepository(session)

    async def _get_course(self, course_id: str) -> AnalyticsCourse:
        course = await self.courses.get_by_id(course_id)
        if course is None:
            raise not_found()
        return course

    async def _get_as_member(self, course_id: str, user: ActingUser) -> AnalyticsCourse:
        course = await self._get_course(course_id)
        if not course.is_member(user.uuid):
            raise unauthorized()
        return course

    async def _get_as_instructor(self, course_id: str, user: ActingUser) -> AnalyticsCourse:
        course = await self._get_course(course_id)
        if not course.is_instructor(user.uuid):
            raise unauthorized()
        return course

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    @staticmethod
    async def verify_textbook(client: LibreTextsClient, url: str) -> str:
        """Check that ``url`` is a public book cover page and return its book identifier."""
        parts = client.parse_page_url(url)
        if parts is None:
            raise bad_request("err76")
        try:
            info = await client.get_page_info(parts["subdomain"], parts["path"])
            tags = await client.get_page_tags_by_path(parts["subdomain"], parts["path"])
        except LibreTextsApiError as exc:
            logger.warning(f"Textbook lookup failed for {url}: {exc}")
            raise bad_request("err76") from exc
        page_id = info.get("@id") if isinstance(info, dict) else None
        if not page_id or not any(tag in COVERPAGE_TAGS for tag in tags):
            raise bad_request("err76")
        return f"{parts['subdomain']}-{page_id}"

    @staticmethod
    async def connect_adapt(client: AdaptClient, course_id: str, sharing_key: str) -> str:
        try:
            adapt_course_id = await client.sync_course(course_id, sharing_key)
        except LibreTextsApiError as exc:
            logger.warning(f"ADAPT sharing key rejected for course {course_id}: {exc}")
            raise bad_request("err77") from exc
        if not adapt_course_id:
            raise bad_request("err77")
        return adapt_course_id

    async def create(
        self,
        payload: AnalyticsCourseCreate,
        user: ActingUser,
        libretexts: LibreTextsClient,
        adapt: AdaptClient,
    ) -> str:
        textbook_url = (payload.textbook_url or "").strip()
        sharing_key = (payload.adapt_sharing_key or "").strip()
        if not sharing_key and ".libretexts.org" not in textbook_url:
            raise bad_request("err75")
        start_date, end_date = parse_course_dates(payload.start, payload.end)

        course = AnalyticsCourse(
            course_id=generate_b62_id(6),
            title=payload.title.strip(),
            term=payload.term.strip(),
            start_date=start_date,
            end_date=end_date,
            status="active",
            creator=user.uuid,
            instructors=[user.uuid],
        )
        if textbook_url:
            course.pending_textbook_id = await self.verify_textbook(libretexts, textbook_url)
            course.pending_textbook_url = textbook_url
            course.status = "pending"
        if sharing_key:
            course.adapt_course_id = await self.connect_adapt(adapt, course.course_id, sharing_key)

        await self.courses.create(course)
        if course.pending_textbook_url:
            await self.requests.create(
                AnalyticsAccessRequest(request_id=str(uuid.uuid4()), requester=user.uuid, course_id=course.course_id)
            )
        logger.info(f"Created analytics course {course.course_id} (status={course.status})")
        return course.course_id

    async def list_courses(self, user: ActingUser) -> List[AnalyticsCourseRead]:
        return [to_read(course, user) for course in await self.courses.list_for_user(user.uuid)]

    async def get(self, course_id: str, user: ActingUser) -> AnalyticsCourseRead:
        return to_read(await self._get_as_member(course_id, user), user)

    async def update(self, course_id: str, payload: AnalyticsCourseUpdate, user: ActingUser) -> bool:
        """Returns False when nothing changed."""
        course = await self._get_as_instructor(course_id, user)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return False
        if "title" in changes:
            course.title = changes["title"].strip()
        if "term" in changes:
            course.term = changes["term"].strip()
        if "start" in changes or "end" in changes:
            start = changes.get("start") or course.start_date.strftime(_DATE_FORMAT)
            end = changes.get("end") or course.end_date.strftime(_DATE_FORMAT)
            course.start_date, course.end_date = parse_course_dates(start, end)
        await self.courses.update(course)
        return True

    async def delete(self, course_id: str, user: ActingUser) -> None:
        course = await self._get_course(course_id)
        if course.creator != user.uuid:
            raise unauthorized()
        open_request = await self.requests.get_open_for_course(course_id)
        if open_request is not None:
            await self.requests.delete(open_request.request_id)
        await self.courses.delete(course_id)
        logger.info(f"Deleted analytics course {course_id}")

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    async def get_roster(
        self, course_id: str, user: ActingUser, sort: str = "lastName"
    ) -> Tuple[AnalyticsCourse, List[RosterStudent]]:
        course = await self._get_as_member(course_id, user)
        students = [RosterStudent.model_validate(s) for s in course.students]
        attr = ROSTER_SORT_FIELDS.get(sort, "last_name")
        students.sort(key=lambda s: normalized_sort_key(getattr(s, attr)))
        return course, students

    async def set_roster(self, course_id: str, students: List[RosterStudent], user: ActingUser) -> int:
        course = await self._get_as_instructor(course_id, user)
        unique: Dict[str, Dict[str, Any]] = {}
        for student in students:
            unique.setdefault(student.email, student.model_dump(by_alias=True))
        course.students = list(unique.values())
        await self.courses.update(course)
        return len(course.students)

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    async def get_members(self, course_id: str, user: ActingUser) -> Tuple[AnalyticsCourse, List[CourseMember]]:
        course = await self._get_as_member(course_id, user)
        members = [CourseMember(uuid=u, role="instructor", creator=u == course.creator) for u in course.instructors]
        members += [CourseMember(uuid=u, role="viewer", creator=u == course.creator) for u in course.viewers]
        return course, members

    async def update_member_role(self, course_id: str, member_uuid: str, role: str, user: ActingUser) -> None:
        course = await self._get_as_instructor(course_id, user)
        if not course.is_member(member_uuid) or member_uuid == course.creator:
            raise bad_request("err2")
        instructors = [u for u in course.instructors if u != member_uuid]
        viewers = [u for u in course.viewers if u != member_uuid]
        if role == "instructor":
            instructors.append(member_uuid)
        else:
            viewers.append(member_uuid)
        course.instructors, course.viewers = instructors, viewers
        await self.courses.update(course)

    async def remove_member(self, course_id: str, member_uuid: str, user: ActingUser) -> None:
        course = await self._get_as_instructor(course_id, user)
        if not course.is_member(member_uuid) or member_uuid == course.creator:
            raise bad_request("err2")
        course.instructors = [u for u in course.instructors if u != member_uuid]
        course.viewers = [u for u in course.viewers if u != member_uuid]
        await self.courses.update(course)

    # ------------------------------------------------------------------
    # Textbook access requests
    # ------------------------------------------------------------------

    async def list_access_requests(self) -> List[AccessRequestRead]:
        requests = await self.requests.list_open()
        courses = {c.course_id: c for c in await self.courses.get_many([r.course_id for r in requests])}
        return [
            AccessRequestRead(
                request_id=r.request_id,
                requester=r.requester,
                course_id=r.course_id,
                status=r.status,
                created_at=r.created_at,
                pending_textbook_url=courses[r.course_id].pending_textbook_url if r.course_id in courses else None,
            )
            for r in requests
        ]

    async def decide_access_request(self, request_id: str, verb: str) -> None:
        request = await self.requests.get_by_id(request_id)
        if request is None or request.status != "open":
            raise not_found()
        course = await self._get_course(request.course_id)

        if verb == "approve":
            course.textbook_url = course.pending_textbook_url
            course.textbook_id = course.pending_textbook_id
            course.textbook_denied = False
            request.status = "approved"
        else:
            course.textbook_denied = True
            request.status = "denied"
        course.pending_textbook_url = None
        course.pending_textbook_id = None
        course.status = "active"

        await self.courses.update(course)
        await self.requests.update(request)
        logger.info(f"Access request {request_id} {request.status} for course {course.course_id}")
