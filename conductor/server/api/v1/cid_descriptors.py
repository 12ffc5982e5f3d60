"""
C-ID Descriptor Endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Query

from conductor.core.models.io.cid_descriptors import CIDDescriptorListResponse, CIDDescriptorRead
from conductor.core.models.io.common import MessageResponse
from conductor.server.services.deps import CIDClientDep, CIDServiceDep, SuperAdminDep

router = APIRouter()


@router.get(
    "",
    response_model=CIDDescriptorListResponse,
    summary="List C-ID Descriptors",
    description="Retrieve C-ID descriptors sorted by code, optionally filtered by code or title.",
    response_description="List of descriptors.",
)
async def list_cid_descriptors(
    service: CIDServiceDep, query: Optional[str] = Query(default=None, max_length=100)
) -> CIDDescriptorListResponse:
    descriptors = await service.search(query)
    return CIDDescriptorListResponse(descriptors=[CIDDescriptorRead.model_validate(d) for d in descriptors])


@router.put(
    "/sync/automated",
    response_model=MessageResponse,
    summary="Sync C-ID Descriptors",
    description="Download the approved C-ID descriptors and upsert them.",
    response_description="Confirmation message.",
    responses={500: {"description": "Sync failed"}},
)
async def sync_cid_descriptors(service: CIDServiceDep, client: CIDClientDep, user: SuperAdminDep) -> MessageResponse:
    return MessageResponse(msg=await service.sync(client))
