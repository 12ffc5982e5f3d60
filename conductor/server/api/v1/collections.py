"""
Collection Management Endpoints.

This module handles creating, editing and browsing collections: curated,
optionally nested groups of Commons books.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Query

from conductor.core.models.io.collections import (
    AddResourcesRequest,
    CollectionCreate,
    CollectionCreatedResponse,
    CollectionListResponse,
    CollectionResourcesResponse,
    CollectionResponse,
    CollectionUpdate,
)
from conductor.core.models.io.common import MessageResponse
from conductor.server.services.deps import CampusAdminDep, CollectionServiceDep

router = APIRouter()


@router.post(
    "",
    response_model=CollectionCreatedResponse,
    status_code=201,
    summary="Create Collection",
    description="Create a collection, optionally nested inside a parent collection.",
    response_description="The new collection identifier.",
    responses={404: {"description": "Parent collection not found"}},
)
async def create_collection(
    payload: CollectionCreate, service: CollectionServiceDep, user: CampusAdminDep
) -> CollectionCreatedResponse:
    coll_id = await service.create(payload)
    return CollectionCreatedResponse(msg="Collection successfully created.", coll_id=coll_id)


@router.get(
    "/all",
    response_model=CollectionListResponse,
    summary="List All Collections",
    description="Retrieve every root-level collection of this instance regardless of privacy.",
    response_description="List of collections.",
)
async def list_all_collections(
    service: CollectionServiceDep, user: CampusAdminDep, detailed: bool = Query(default=False)
) -> CollectionListResponse:
    collections = await service.list_all(detailed=detailed)
    return CollectionListResponse(collections=collections, total_items=len(collections))


@router.get(
    "/{coll_id}",
    response_model=CollectionResponse,
    summary="Get Collection",
    description="Retrieve a collection by identifier or by its URL-encoded title.",
    response_description="The collection without its resources.",
    responses={404: {"description": "Collection not found"}},
)
async def get_collection(coll_id: str, service: CollectionServiceDep) -> CollectionResponse:
    return CollectionResponse(collection=await service.get(coll_id))


@router.put(
    "/{coll_id}",
    response_model=MessageResponse,
    summary="Edit Collection",
    description="Apply a partial update; changing the parent moves the collection.",
    response_description="Confirmation message.",
)
async def edit_collection(
    coll_id: str, payload: CollectionUpdate, service: CollectionServiceDep, user: CampusAdminDep
) -> MessageResponse:
    changed = await service.edit(coll_id, payload)
    return MessageResponse(msg="Collection successfully updated." if changed else "No changes to save.")


@router.delete(
    "/{coll_id}",
    response_model=MessageResponse,
    summary="Delete Collection",
    description="Delete a collection and remove it from its parent.",
    response_description="Confirmation message.",
)
async def delete_collection(coll_id: str, service: CollectionServiceDep, user: CampusAdminDep) -> MessageResponse:
    await service.delete(coll_id)
    return MessageResponse(msg="Collection successfully deleted.")


@router.get(
    "/{coll_id}/resources",
    response_model=CollectionResourcesResponse,
    summary="Get Collection Resources",
    description="Retrieve a collection's books and child collections with their records.",
    response_description="A page of resolved resources and the total count.",
)
async def get_collection_resources(
    coll_id: str,
    service: CollectionServiceDep,
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    page: int = Query(default=1, ge=1),
    query: Optional[str] = Query(default=None, max_length=100),
    sort: Literal["title", "author"] = Query(default="title"),
    sort_direction: Literal["ascending", "descending"] = Query(default="ascending", alias="sortDirection"),
) -> CollectionResourcesResponse:
    resources, total = await service.get_resources(
        coll_id, query=query, sort=sort, descending=sort_direction == "descending", limit=limit, page=page
    )
    return CollectionResourcesResponse(coll_id=coll_id, resources=resources, total_items=total)


@router.put(
    "/{coll_id}/resources",
    response_model=MessageResponse,
    summary="Add Collection Resources",
    description="Add books to a collection, skipping ones already present.",
    response_description="Confirmation message.",
)
async def add_collection_resources(
    coll_id: str, payload: AddResourcesRequest, service: CollectionServiceDep, user: CampusAdminDep
) -> MessageResponse:
    await service.add_resources(coll_id, payload.books)
    return MessageResponse(msg="Resources successfully added to Collection.")


@router.delete(
    "/{coll_id}/resources/{resource_id}",
    response_model=MessageResponse,
    summary="Remove Collection Resource",
    description="Remove every entry with the given resource identifier from a collection.",
    response_description="Confirmation message.",
)
async def remove_collection_resource(
    coll_id: str, resource_id: str, service: CollectionServiceDep, user: CampusAdminDep
) -> MessageResponse:
    await service.remove_resource(coll_id, resource_id)
    return MessageResponse(msg="Resource successfully removed from Collection.")
