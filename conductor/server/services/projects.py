"""Project service: creation, visibility-aware reads and updates."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.projects import Project
from conductor.core.database.repositories import ProjectRepository
from conductor.core.errors import bad_request, not_found, unauthorized
from conductor.core.logging_config import get_logger
from conductor.core.models.io.projects import ProjectCreate, ProjectUpdate
from conductor.core.utils import generate_b62_id
from conductor.server.core.config import settings
from conductor.server.core.deps import ActingUser

from .permissions import has_general_access, is_project_admin

logger = get_logger(__name__)


class ProjectService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.projects = ProjectRepository(session)

    async def get_or_404(self, project_id: str) -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise not_found()
        return project

    async def _ensure_book_available(
        self, library: Optional[str], cover_id: Optional[str], project_id: Optional[str] = None
    ) -> None:
        """A library book may be linked to a single project only."""
        if not library or not cover_id:
            return
        existing = await self.projects.get_by_book(library, cover_id)
        if existing is not None and existing.project_id != project_id:
            raise bad_request("err80")

    async def create(self, payload: ProjectCreate, user: ActingUser) -> Project:
        await self._ensure_book_available(payload.libre_library, payload.libre_cover_id)
        project = Project(
            project_id=generate_b62_id(10),
            org_id=settings.org_id,
            leads=[user.uuid],
            **payload.model_dump(),
        )
        project.members = [m for m in project.members if m != user.uuid]
        await self.projects.create(project)
        logger.info(f"Created project {project.project_id} for {user.uuid}")
        return project

    async def get(self, project_id: str, user: ActingUser) -> Project:
        project = await self.get_or_404(project_id)
        if not has_general_access(project, user):
            raise unauthorized()
        return project

    async def update(self, project_id: str, payload: ProjectUpdate, user: ActingUser) -> Project:
        project = await self.get_or_404(project_id)
        if not is_project_admin(project, user):
            raise unauthorized()

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        library = changes.get("libre_library", project.libre_library)
        cover_id = changes.get("libre_cover_id", project.libre_cover_id)
        await self._ensure_book_available(library, cover_id, project.project_id)

        for field, value in changes.items():
            setattr(project, field, list(value) if isinstance(value, list) else value)
        return await self.projects.update(project)
