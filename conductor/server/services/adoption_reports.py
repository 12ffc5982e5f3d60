"""Adoption report submission and administration."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.adoption_reports import AdoptionReport
from conductor.core.database.repositories import AdoptionReportRepository
from conductor.core.errors import bad_request, not_found
from conductor.core.logging_config import get_logger
from conductor.core.models.io.adoption_reports import AdoptionReportCreate

logger = get_logger(__name__)

INSTRUCTOR_NUMBER_FIELDS = ("students", "replaceCost", "printCost")
STUDENT_NUMBER_FIELDS = ("quality", "navigation", "printCost")


def parse_count(value: Any) -> Optional[int]:
    """Parse a numeric form answer; blank answers are treated as omitted."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise bad_request("err1")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError as exc:
        raise bad_request("err1") from exc


def _clean_details(details: Dict[str, Any], number_fields: tuple) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    for key, value in details.items():
        if key in number_fields:
            value = parse_count(value)
        elif isinstance(value, str):
            value = value.strip() or None
        if value is not None:
            cleaned[key] = value
    return cleaned


class AdoptionReportService:
    def __init__(self, session: AsyncSession) -> None:
        self.reports = AdoptionReportRepository(session)

    async def submit(self, payload: AdoptionReportCreate) -> str:
        instructor = student = None
        if payload.role == "instructor" and payload.instructor is not None:
            instructor = _clean_details(
                payload.instructor.model_dump(by_alias=True, exclude_none=True), INSTRUCTOR_NUMBER_FIELDS
            )
        if payload.role == "student" and payload.student is not None:
            student = _clean_details(
                payload.student.model_dump(by_alias=True, exclude_none=True), STUDENT_NUMBER_FIELDS
            )

        report = AdoptionReport(
            report_id=str(uuid.uuid4()),
            email=payload.email.strip(),
            name=payload.name.strip(),
            role=payload.role,
            resource=payload.resource.model_dump(exclude_none=True),
            instructor=instructor,
            student=student,
            comments=(payload.comments or "").strip() or None,
        )
        await self.reports.create(report)
        logger.info(f"Adoption report {report.report_id} filed for {report.resource.get('id')}")
        return report.report_id

    async def list_reports(self) -> List[AdoptionReport]:
        return await self.reports.list_newest_first()

    async def delete(self, report_id: str) -> None:
        if not await self.reports.delete(report_id):
            raise not_found()
