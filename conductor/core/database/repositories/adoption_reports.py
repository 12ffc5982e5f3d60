"""Adoption report repository."""

from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.adoption_reports import AdoptionReport
from .base import AsyncSQLModelRepository


class AdoptionReportRepository(AsyncSQLModelRepository[AdoptionReport]):
    id_field = "report_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AdoptionReport)

    async def list_newest_first(self) -> List[AdoptionReport]:
        result = await self.session.execute(select(AdoptionReport).order_by(AdoptionReport.created_at.desc()))
        return list(result.scalars().all())

    async def delete_for_resource(self, resource_id: str) -> int:
        """Delete every report filed against the book ``resource_id``."""
        reports = await self.list()
        removed = 0
        for report in reports:
            if (report.resource or {}).get("id") == resource_id:
                await self.session.delete(report)
                removed += 1
        await self.session.commit()
        return removed
