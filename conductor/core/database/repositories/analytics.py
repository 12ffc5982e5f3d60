"""Analytics course and access request repositories."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.analytics import AnalyticsAccessRequest, AnalyticsCourse
from .base import AsyncSQLModelRepository


class AnalyticsCourseRepository(AsyncSQLModelRepository[AnalyticsCourse]):
    id_field = "course_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AnalyticsCourse)

    async def list_for_user(self, uuid: str) -> List[AnalyticsCourse]:
        """Courses where ``uuid`` is an instructor or a viewer, sorted by title."""
        result = await self.session.execute(select(AnalyticsCourse).order_by(AnalyticsCourse.title))
        return [course for course in result.scalars().all() if course.is_member(uuid)]


class AnalyticsAccessRequestRepository(AsyncSQLModelRepository[AnalyticsAccessRequest]):
    id_field = "request_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AnalyticsAccessRequest)

    async def list_open(self) -> List[AnalyticsAccessRequest]:
        stmt = (
            select(AnalyticsAccessRequest)
            .where(AnalyticsAccessRequest.status == "open")
            .order_by(AnalyticsAccessRequest.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_open_for_course(self, course_id: str) -> Optional[AnalyticsAccessRequest]:
        stmt = select(AnalyticsAccessRequest).where(
            (AnalyticsAccessRequest.course_id == course_id) & (AnalyticsAccessRequest.status == "open")
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
