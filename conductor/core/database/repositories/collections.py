"""
Collection repository.

Root-level listings (no parent) back the Commons collection pages; nested
collections are reached through their parent's resource entries.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.collections import Collection
from .base import AsyncSQLModelRepository, QueryBuilder

SORTABLE_FIELDS = ("title", "program", "coll_id", "created_at")


class CollectionRepository(AsyncSQLModelRepository[Collection]):
    """Repository for collections."""

    id_field = "coll_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Collection)

    async def get_by_id_or_title(self, identifier: str) -> Optional[Collection]:
        stmt = select(Collection).where(or_(Collection.coll_id == identifier, Collection.title == identifier))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    def _root_query(self, org_id: str, privacy: Optional[str], query: Optional[str]):
        stmt = select(Collection).where((Collection.org_id == org_id) & (Collection.parent_id.is_(None)))
        if privacy:
            stmt = stmt.where(Collection.privacy == privacy)
        if query:
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(or_(Collection.title.ilike(pattern), Collection.program.ilike(pattern)))
        return stmt

    async def list_root(
        self,
        org_id: str,
        privacy: Optional[str] = None,
        query: Optional[str] = None,
        sort: str = "title",
        descending: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Collection]:
        """Root-level collections of an organization.

        Args:
            org_id: Owning organization
            privacy: Restrict to one privacy setting, or ``None`` for all
            query: Case-insensitive match on title or program
            sort: Field to sort by; unknown fields fall back to title
            descending: Reverse the sort order
            limit: Maximum number of records
            offset: Number of records to skip
        """
        column = getattr(Collection, sort if sort in SORTABLE_FIELDS else "title")
        stmt = self._root_query(org_id, privacy, query).order_by(column.desc() if descending else column.asc())
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_root(self, org_id: str, privacy: Optional[str] = None, query: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(self._root_query(org_id, privacy, query).subquery())
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_auto_managed(self) -> List[Collection]:
        stmt = select(Collection).where(
            (Collection.auto_manage == True) & (Collection.program.is_not(None)) & (Collection.program != "")  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_containing(self, resource_id: str) -> List[Collection]:
        """Collections with ``resource_id`` among their entries."""
        result = await self.session.execute(select(Collection))
        return [coll for coll in result.scalars().all() if coll.has_resource(resource_id)]
