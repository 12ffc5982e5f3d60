"""
Collection I/O models.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .common import APIModel, ConductorResponse


class ResourceEntry(APIModel):
    resource_type: Literal["resource", "collection"] = Field(alias="resourceType")
    resource_id: str = Field(alias="resourceID")


class CollectionRead(APIModel):
    """Schema for reading a collection."""

    coll_id: str = Field(alias="collID")
    org_id: str = Field(alias="orgID")
    title: str
    cover_photo: Optional[str] = None
    privacy: str = "public"
    auto_manage: bool = False
    program: Optional[str] = None
    locations: List[str] = Field(default_factory=list)
    parent_id: Optional[str] = Field(default=None, alias="parentID")
    resource_count: int = 0
    resources: Optional[List[ResourceEntry]] = None


class CollectionCreate(APIModel):
    title: str = Field(min_length=1, max_length=200)
    cover_photo: Optional[str] = None
    privacy: Literal["public", "private", "campus"] = "public"
    auto_manage: bool = False
    program: Optional[str] = None
    locations: List[Literal["central", "campus"]] = Field(default_factory=list)
    parent_id: Optional[str] = Field(default=None, alias="parentID")


class CollectionUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    cover_photo: Optional[str] = None
    privacy: Optional[Literal["public", "private", "campus"]] = None
    auto_manage: Optional[bool] = None
    program: Optional[str] = None
    locations: Optional[List[Literal["central", "campus"]]] = None
    parent_id: Optional[str] = Field(default=None, alias="parentID")


class CollectionCreatedResponse(ConductorResponse):
    msg: str
    coll_id: str = Field(alias="collID")


class CollectionResponse(ConductorResponse):
    collection: CollectionRead


class CollectionListResponse(ConductorResponse):
    collections: List[CollectionRead]
    total_items: int


class CollectionResourceRead(APIModel):
    resource_type: str = Field(alias="resourceType")
    resource_id: str = Field(alias="resourceID")
    resource_data: Dict[str, Any]


class CollectionResourcesResponse(ConductorResponse):
    coll_id: str = Field(alias="collID")
    resources: List[CollectionResourceRead]
    total_items: int


class AddResourcesRequest(APIModel):
    books: List[str] = Field(min_length=1)
