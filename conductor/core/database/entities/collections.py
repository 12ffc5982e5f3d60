"""
Collection entity models.

Collections group books (``resource`` entries) and other collections
(``collection`` entries) into campus catalogs. Nesting is expressed twice:
the child's ``parent_id`` and an entry in the parent's ``resources``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now

COLLECTION_PRIVACY = ("public", "private", "campus")
COLLECTION_LOCATIONS = ("central", "campus")
RESOURCE_TYPES = ("resource", "collection")


class CollectionBase(Base):
    """Base fields for a collection."""

    org_id: str = Field(index=True)
    title: str = Field(index=True)
    cover_photo: Optional[str] = Field(default=None)
    privacy: str = Field(default="public", description="public | private | campus")
    auto_manage: bool = Field(default=False, description="Filled automatically from program tags on library sync")
    program: Optional[str] = Field(default=None)
    locations: List[str] = Field(default_factory=list, sa_type=JSON)
    parent_id: Optional[str] = Field(default=None, index=True)
    resources: List[Dict[str, Any]] = Field(
        default_factory=list, sa_type=JSON, description="[{resourceType, resourceID}]"
    )


class Collection(CollectionBase, table=True):
    """Table: collections"""

    __tablename__ = "collections"
    __table_args__ = ({"extend_existing": True},)

    coll_id: str = Field(primary_key=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def has_resource(self, resource_id: str) -> bool:
        return any(entry.get("resourceID") == resource_id for entry in self.resources)

    def __repr__(self) -> str:
        return f"Collection(id={self.coll_id}, title={self.title!r}, resources={len(self.resources)})"
