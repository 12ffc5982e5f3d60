"""
Service Dependencies.

FastAPI providers for the services and outbound clients used by the API
endpoints. Tests replace them through ``app.dependency_overrides``.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database import async_session_maker, get_session
from conductor.server.core.config import settings
from conductor.server.core.deps import ActingUser, get_acting_user, require_campus_admin, require_superadmin, require_user

from .adoption_reports import AdoptionReportService
from .ai_metadata import AIMetadataGenerator
from .analytics import AnalyticsService
from .batch_jobs import BatchJobRunner, BatchJobService
from .catalog import CatalogService
from .cid_sync import CIDDescriptorService
from .collections import CollectionService
from .library_sync import LibrarySyncService
from .libretexts_client import AdaptClient, CIDClient, LibreTextsClient
from .organizations import OrganizationService
from .peer_review import PeerReviewService
from .projects import ProjectService

SessionDep = Annotated[AsyncSession, Depends(get_session)]

ActingUserDep = Annotated[ActingUser, Depends(get_acting_user)]
UserDep = Annotated[ActingUser, Depends(require_user)]
CampusAdminDep = Annotated[ActingUser, Depends(require_campus_admin)]
SuperAdminDep = Annotated[ActingUser, Depends(require_superadmin)]


# =====================================================================
# Outbound clients
# =====================================================================


def build_libretexts_client() -> LibreTextsClient:
    return LibreTextsClient(settings.libretexts)


async def get_libretexts_client() -> AsyncGenerator[LibreTextsClient, None]:
    client = build_libretexts_client()
    try:
        yield client
    finally:
        await client.aclose()


async def get_adapt_client() -> AsyncGenerator[AdaptClient, None]:
    client = AdaptClient(settings.libretexts)
    try:
        yield client
    finally:
        await client.aclose()


async def get_cid_client() -> AsyncGenerator[CIDClient, None]:
    client = CIDClient(settings.libretexts)
    try:
        yield client
    finally:
        await client.aclose()


def get_ai_generator() -> AIMetadataGenerator:
    return AIMetadataGenerator(config=settings.openai)


def get_batch_job_runner(
    generator: Annotated[AIMetadataGenerator, Depends(get_ai_generator)],
) -> BatchJobRunner:
    """The runner outlives the request, so it builds and closes its own client."""
    return BatchJobRunner(
        session_factory=async_session_maker,
        client_factory=build_libretexts_client,
        generator=generator,
        max_delay_ms=settings.batch_job_max_delay_ms,
    )


LibreTextsClientDep = Annotated[LibreTextsClient, Depends(get_libretexts_client)]
AdaptClientDep = Annotated[AdaptClient, Depends(get_adapt_client)]
CIDClientDep = Annotated[CIDClient, Depends(get_cid_client)]
BatchJobRunnerDep = Annotated[BatchJobRunner, Depends(get_batch_job_runner)]


# =====================================================================
# Services
# =====================================================================


def get_catalog_service(session: SessionDep) -> CatalogService:
    return CatalogService(session)


def get_library_sync_service(session: SessionDep, client: LibreTextsClientDep) -> LibrarySyncService:
    return LibrarySyncService(session, client, settings.libretexts.libraries)


def get_collection_service(session: SessionDep) -> CollectionService:
    return CollectionService(session)


def get_project_service(session: SessionDep) -> ProjectService:
    return ProjectService(session)


def get_batch_job_service(session: SessionDep) -> BatchJobService:
    return BatchJobService(session)


def get_peer_review_service(session: SessionDep) -> PeerReviewService:
    return PeerReviewService(session)


def get_adoption_report_service(session: SessionDep) -> AdoptionReportService:
    return AdoptionReportService(session)


def get_cid_service(session: SessionDep) -> CIDDescriptorService:
    return CIDDescriptorService(session)


def get_analytics_service(session: SessionDep) -> AnalyticsService:
    return AnalyticsService(session)


def get_organization_service(session: SessionDep) -> OrganizationService:
    return OrganizationService(session)


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
LibrarySyncServiceDep = Annotated[LibrarySyncService, Depends(get_library_sync_service)]
CollectionServiceDep = Annotated[CollectionService, Depends(get_collection_service)]
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
BatchJobServiceDep = Annotated[BatchJobService, Depends(get_batch_job_service)]
PeerReviewServiceDep = Annotated[PeerReviewService, Depends(get_peer_review_service)]
AdoptionReportServiceDep = Annotated[AdoptionReportService, Depends(get_adoption_report_service)]
CIDServiceDep = Annotated[CIDDescriptorService, Depends(get_cid_service)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
OrganizationServiceDep = Annotated[OrganizationService, Depends(get_organization_service)]
