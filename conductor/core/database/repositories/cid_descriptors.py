"""C-ID descriptor repository."""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.cid_descriptors import CIDDescriptor
from .base import AsyncSQLModelRepository


class CIDDescriptorRepository(AsyncSQLModelRepository[CIDDescriptor]):
    id_field = "descriptor"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CIDDescriptor)

    async def search(self, query: Optional[str] = None) -> List[CIDDescriptor]:
        """Descriptors sorted by code, optionally matching ``query`` on code or title."""
        stmt = select(CIDDescriptor).order_by(CIDDescriptor.descriptor)
        if query:
            pattern = f"%{query.strip()}%"
            stmt = stmt.where(or_(CIDDescriptor.descriptor.ilike(pattern), CIDDescriptor.title.ilike(pattern)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def upsert_many(self, descriptors: Sequence[CIDDescriptor]) -> int:
        existing = {d.descriptor: d for d in await self.get_many([d.descriptor for d in descriptors])}
        for incoming in descriptors:
            current = existing.get(incoming.descriptor)
            if current is None:
                self.session.add(incoming)
                continue
            current.title = incoming.title
            current.description = incoming.description
            current.approved = incoming.approved
            current.expires = incoming.expires
            self.session.add(current)
        await self.session.commit()
        return len(descriptors)
