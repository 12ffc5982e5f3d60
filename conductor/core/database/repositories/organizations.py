"""Organization and custom catalog repositories."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.organizations import CustomCatalog, Organization
from .base import AsyncSQLModelRepository


class OrganizationRepository(AsyncSQLModelRepository[Organization]):
    id_field = "org_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Organization)


class CustomCatalogRepository(AsyncSQLModelRepository[CustomCatalog]):
    id_field = "org_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CustomCatalog)
