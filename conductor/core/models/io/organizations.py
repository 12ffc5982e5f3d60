"""Organization I/O models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from .common import APIModel, ConductorResponse


class OrganizationRead(APIModel):
    org_id: str = Field(alias="orgID")
    name: str
    short_name: Optional[str] = None
    abbreviation: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)
    catalog_matching_tags: List[str] = Field(default_factory=list)


class OrganizationUpdate(APIModel):
    """Create-or-update payload; ``name`` is required when the organization is new."""

    name: Optional[str] = Field(default=None, min_length=1)
    short_name: Optional[str] = None
    abbreviation: Optional[str] = None
    aliases: Optional[List[str]] = None
    catalog_matching_tags: Optional[List[str]] = None


class OrganizationResponse(ConductorResponse):
    org: OrganizationRead


class CustomCatalogUpdate(APIModel):
    resources: List[str]


class CustomCatalogResponse(ConductorResponse):
    org_id: str = Field(alias="orgID")
    resources: List[str]
