"""
Organization Endpoints.

This module handles organization profiles and their custom catalogs.
"""

from fastapi import APIRouter

from conductor.core.errors import unauthorized
from conductor.core.models.io.organizations import (
    CustomCatalogResponse,
    CustomCatalogUpdate,
    OrganizationRead,
    OrganizationResponse,
    OrganizationUpdate,
)
from conductor.server.core.deps import ActingUser
from conductor.server.services.deps import OrganizationServiceDep, UserDep

router = APIRouter()


def _ensure_campus_admin(org_id: str, user: ActingUser) -> None:
    if not user.has_role(org_id, "campusadmin"):
        raise unauthorized()


@router.get(
    "/{org_id}",
    response_model=OrganizationResponse,
    summary="Get Organization",
    description="Retrieve an organization's profile.",
    response_description="The organization.",
    responses={404: {"description": "Organization not found"}},
)
async def get_organization(org_id: str, service: OrganizationServiceDep) -> OrganizationResponse:
    return OrganizationResponse(org=OrganizationRead.model_validate(await service.get(org_id)))


@router.put(
    "/{org_id}",
    response_model=OrganizationResponse,
    summary="Update Organization",
    description="Create an organization or update its profile fields.",
    response_description="The updated organization.",
)
async def update_organization(
    org_id: str, payload: OrganizationUpdate, service: OrganizationServiceDep, user: UserDep
) -> OrganizationResponse:
    _ensure_campus_admin(org_id, user)
    org = await service.upsert(org_id, payload)
    return OrganizationResponse(org=OrganizationRead.model_validate(org))


@router.get(
    "/{org_id}/customcatalog",
    response_model=CustomCatalogResponse,
    summary="Get Custom Catalog",
    description="Retrieve the books hand-picked into an organization's catalog.",
    response_description="List of book identifiers.",
)
async def get_custom_catalog(org_id: str, service: OrganizationServiceDep) -> CustomCatalogResponse:
    return CustomCatalogResponse(org_id=org_id, resources=await service.get_custom_catalog(org_id))


@router.put(
    "/{org_id}/customcatalog",
    response_model=CustomCatalogResponse,
    summary="Update Custom Catalog",
    description="Replace the books hand-picked into an organization's catalog.",
    response_description="The stored list of book identifiers.",
)
async def update_custom_catalog(
    org_id: str, payload: CustomCatalogUpdate, service: OrganizationServiceDep, user: UserDep
) -> CustomCatalogResponse:
    _ensure_campus_admin(org_id, user)
    resources = await service.set_custom_catalog(org_id, payload.resources)
    return CustomCatalogResponse(org_id=org_id, resources=resources)
