"""
Project and batch job repositories.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.projects import BatchUpdateJob, Project
from .base import AsyncSQLModelRepository


class ProjectRepository(AsyncSQLModelRepository[Project]):
    """Repository for projects."""

    id_field = "project_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def list_with_linked_books(self, org_id: str) -> List[Project]:
        """Projects of ``org_id`` that carry both a library and a cover page id."""
        stmt = select(Project).where(
            and_(
                Project.org_id == org_id,
                Project.libre_library.is_not(None),
                Project.libre_library != "",
                Project.libre_cover_id.is_not(None),
                Project.libre_cover_id != "",
            )
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_book(self, library: str, cover_id: str) -> Optional[Project]:
        stmt = select(Project).where((Project.libre_library == library) & (Project.libre_cover_id == cover_id))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_book_id(self, book_id: str) -> Optional[Project]:
        if "-" not in book_id:
            return None
        library, cover_id = book_id.split("-", 1)
        return await self.get_by_book(library, cover_id)

    async def list_linked_book_keys(self) -> set:
        """Every ``(library, cover_id)`` pair already linked to some project."""
        stmt = select(Project.libre_library, Project.libre_cover_id).where(
            Project.libre_library.is_not(None) & Project.libre_cover_id.is_not(None)
        )
        result = await self.session.execute(stmt)
        return {(lib, cover) for lib, cover in result.all()}

    async def create_many(self, projects: Sequence[Project]) -> int:
        for project in projects:
            self.session.add(project)
        await self.session.commit()
        return len(projects)


class BatchUpdateJobRepository(AsyncSQLModelRepository[BatchUpdateJob]):
    """Repository for batch AI metadata jobs."""

    id_field = "job_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BatchUpdateJob)

    async def list_for_project(self, project_id: str) -> List[BatchUpdateJob]:
        stmt = (
            select(BatchUpdateJob)
            .where(BatchUpdateJob.project_id == project_id)
            .order_by(BatchUpdateJob.start_timestamp.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active(self, project_id: str) -> Optional[BatchUpdateJob]:
        """The project's pending or running job, if any."""
        stmt = select(BatchUpdateJob).where(
            (BatchUpdateJob.project_id == project_id) & (BatchUpdateJob.status.in_(["pending", "running"]))
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
