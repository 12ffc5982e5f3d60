"""Peer review and rubric repositories."""

from __future__ import annotations

from typing import List

from sqlalchemy import delete as sa_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.peer_reviews import PeerReview, PeerReviewRubric
from .base import AsyncSQLModelRepository


class PeerReviewRepository(AsyncSQLModelRepository[PeerReview]):
    id_field = "peer_review_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PeerReview)

    async def list_for_project(self, project_id: str) -> List[PeerReview]:
        """A project's reviews, newest first."""
        stmt = select(PeerReview).where(PeerReview.project_id == project_id).order_by(PeerReview.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_for_project(self, project_id: str) -> int:
        result = await self.session.execute(sa_delete(PeerReview).where(PeerReview.project_id == project_id))
        await self.session.commit()
        return result.rowcount or 0


class PeerReviewRubricRepository(AsyncSQLModelRepository[PeerReviewRubric]):
    id_field = "rubric_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PeerReviewRubric)
