"""Organization profile and custom catalog management."""

from __future__ import annotations

from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.organizations import CustomCatalog, Organization
from conductor.core.database.repositories import CustomCatalogRepository, OrganizationRepository
from conductor.core.errors import bad_request, not_found
from conductor.core.logging_config import get_logger
from conductor.core.models.io.organizations import OrganizationUpdate

logger = get_logger(__name__)


class OrganizationService:
    def __init__(self, session: AsyncSession) -> None:
        self.organizations = OrganizationRepository(session)
        self.catalogs = CustomCatalogRepository(session)

    async def get(self, org_id: str) -> Organization:
        org = await self.organizations.get_by_id(org_id)
        if org is None:
            raise not_found()
        return org

    async def upsert(self, org_id: str, payload: OrganizationUpdate) -> Organization:
        """Create the organization or apply the given fields to it."""
        changes = {
            field: list(dict.fromkeys(v.strip() for v in value if v and v.strip())) if isinstance(value, list) else value
            for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items()
        }
        org = await self.organizations.get_by_id(org_id)
        if org is None:
            if not changes.get("name"):
                raise bad_request("err1")
            org = Organization(org_id=org_id, **changes)
            logger.info(f"Creating organization {org_id}")
            return await self.organizations.create(org)

        for field, value in changes.items():
            setattr(org, field, value)
        return await self.organizations.update(org)

    async def get_custom_catalog(self, org_id: str) -> List[str]:
        catalog = await self.catalogs.get_by_id(org_id)
        return list(catalog.resources) if catalog else []

    async def set_custom_catalog(self, org_id: str, resources: Sequence[str]) -> List[str]:
        """Replace the catalog's book list, deduplicated with order kept."""
        cleaned = list(dict.fromkeys(r.strip() for r in resources if r and r.strip()))
        catalog = await self.catalogs.get_by_id(org_id)
        if catalog is None:
            await self.catalogs.create(CustomCatalog(org_id=org_id, resources=cleaned))
        else:
            catalog.resources = cleaned
            await self.catalogs.update(catalog)
        logger.info(f"Custom catalog of {org_id} now holds {len(cleaned)} books")
        return cleaned
