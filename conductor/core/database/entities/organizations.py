"""Organization and custom catalog entities."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class OrganizationBase(Base):
    """Base fields for an organization (campus) served by a Conductor instance."""

    name: str = Field(description="Full organization name")
    short_name: Optional[str] = Field(default=None, description="Short display name")
    abbreviation: Optional[str] = Field(default=None, description="Abbreviation (e.g. 'UCD')")
    aliases: List[str] = Field(default_factory=list, sa_type=JSON, description="Alternative names")
    catalog_matching_tags: List[str] = Field(
        default_factory=list, sa_type=JSON, description="Library tags that pull books into the campus catalog"
    )


class Organization(OrganizationBase, table=True):
    """Table: organizations"""

    __tablename__ = "organizations"
    __table_args__ = ({"extend_existing": True},)

    org_id: str = Field(primary_key=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Organization(id={self.org_id}, name={self.name!r})"


class CustomCatalog(Base, table=True):
    """Books hand-picked into an organization's campus catalog.

    Table: custom_catalogs
    """

    __tablename__ = "custom_catalogs"
    __table_args__ = ({"extend_existing": True},)

    org_id: str = Field(primary_key=True)
    resources: List[str] = Field(default_factory=list, sa_type=JSON, description="Book identifiers")

    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"CustomCatalog(org={self.org_id}, resources={len(self.resources)})"
