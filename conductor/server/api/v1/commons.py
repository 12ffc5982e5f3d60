"""
Commons Endpoints.

This module serves the public Commons: the instance catalog, the master
catalog with its filters, single-book views, the public collection listing
and the Commons-Libraries sync.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Query

from conductor.core.logging_config import get_logger
from conductor.core.models.io.books import (
    BookPeerReviewsResponse,
    BookResponse,
    CatalogFiltersResponse,
    CatalogResponse,
    MasterCatalogResponse,
    ReaderResourcesUpdate,
)
from conductor.core.models.io.collections import CollectionListResponse
from conductor.core.models.io.common import MessageResponse
from conductor.server.services.deps import (
    CampusAdminDep,
    CatalogServiceDep,
    CollectionServiceDep,
    LibrarySyncServiceDep,
    SuperAdminDep,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/catalog",
    response_model=CatalogResponse,
    summary="Get Commons Catalog",
    description="Retrieve a random window of the instance catalog.",
    response_description="Total number of catalog books and the returned window.",
)
async def get_commons_catalog(
    service: CatalogServiceDep,
    active_page: int = Query(default=1, ge=1, alias="activePage"),
    limit: int = Query(default=10, ge=1, le=1000),
    sort: Optional[Literal["title", "author"]] = Query(default=None),
) -> CatalogResponse:
    """
    Get the instance catalog.

    Combines the books linked to the organization's projects with, on campus
    instances, books from the custom catalog, matching library tags or the
    organization's names. The window starts at a random offset, so
    ``activePage`` does not select a slice.
    """
    total, books = await service.get_commons_catalog(limit=limit, sort=sort)
    return CatalogResponse(num_total=total, books=books)


@router.get(
    "/mastercatalog",
    response_model=MasterCatalogResponse,
    summary="Get Master Catalog",
    description="Retrieve every Commons book, optionally searched and sorted.",
    response_description="List of books.",
)
async def get_master_catalog(
    service: CatalogServiceDep,
    sort: Literal["title", "author", "random"] = Query(default="title"),
    search: Optional[str] = Query(default=None, max_length=200),
) -> MasterCatalogResponse:
    books = await service.get_master_catalog(sort=sort, search=search)
    return MasterCatalogResponse(books=books)


@router.get(
    "/filters",
    response_model=CatalogFiltersResponse,
    summary="Get Catalog Filters",
    description="Retrieve the unique values available for every catalog filter.",
    response_description="Filter options.",
)
async def get_catalog_filters(service: CatalogServiceDep) -> CatalogFiltersResponse:
    return CatalogFiltersResponse(**await service.get_filters())


@router.get(
    "/book/{book_id}",
    response_model=BookResponse,
    summary="Get Book",
    description="Retrieve a Commons book with its linked project settings.",
    response_description="The book.",
    responses={400: {"description": "Malformed book identifier"}, 404: {"description": "Book not found"}},
)
async def get_book(book_id: str, service: CatalogServiceDep) -> BookResponse:
    return BookResponse(book=await service.get_book(book_id))


@router.get(
    "/book/{book_id}/peerreviews",
    response_model=BookPeerReviewsResponse,
    summary="Get Book Peer Reviews",
    description="Retrieve the peer reviews submitted for a book's linked project.",
    response_description="Peer reviews and whether anonymous reviews are accepted.",
)
async def get_book_peer_reviews(book_id: str, service: CatalogServiceDep) -> BookPeerReviewsResponse:
    return BookPeerReviewsResponse(**await service.get_book_peer_reviews(book_id))


@router.delete(
    "/book/{book_id}",
    response_model=MessageResponse,
    summary="Delete Book",
    description="Delete a book along with its project, reviews, adoption reports and collection entries.",
    response_description="Confirmation message.",
    responses={403: {"description": "Not a super administrator"}, 404: {"description": "Book not found"}},
)
async def delete_book(book_id: str, service: CatalogServiceDep, user: SuperAdminDep) -> MessageResponse:
    await service.delete_book(book_id)
    logger.info(f"Book {book_id} deleted by {user.uuid}")
    return MessageResponse(msg="Book successfully deleted.")


@router.put(
    "/book/{book_id}/readerresources",
    response_model=BookResponse,
    summary="Update Reader Resources",
    description="Replace the reader resources listed with a book.",
    response_description="The updated book.",
)
async def update_reader_resources(
    book_id: str, payload: ReaderResourcesUpdate, service: CatalogServiceDep, user: CampusAdminDep
) -> BookResponse:
    return BookResponse(book=await service.update_reader_resources(book_id, payload.reader_resources))


@router.get(
    "/collections",
    response_model=CollectionListResponse,
    summary="Get Commons Collections",
    description="Retrieve the public root-level collections of this instance.",
    response_description="A page of collections and the total count.",
)
async def get_commons_collections(
    service: CollectionServiceDep,
    limit: int = Query(default=12, ge=1, le=100),
    page: int = Query(default=1, ge=1),
    query: Optional[str] = Query(default=None, max_length=100),
    sort: Literal["title", "program"] = Query(default="title"),
    sort_direction: Literal["ascending", "descending"] = Query(default="ascending", alias="sortDirection"),
) -> CollectionListResponse:
    collections, total = await service.list_commons(
        query=query, sort=sort, descending=sort_direction == "descending", limit=limit, page=page
    )
    return CollectionListResponse(collections=collections, total_items=total)


@router.post(
    "/syncwithlibs",
    response_model=MessageResponse,
    summary="Sync Commons with Libraries",
    description="Import every book listed by the configured libraries into the Commons catalog.",
    response_description="Summary of the sync.",
    responses={500: {"description": "Sync failed"}, 503: {"description": "Library API unavailable"}},
)
async def sync_with_libraries(service: LibrarySyncServiceDep, user: CampusAdminDep) -> MessageResponse:
    logger.info(f"Commons-Libraries sync requested by {user.uuid}")
    return MessageResponse(msg=await service.sync())


@router.put(
    "/automatedsync",
    response_model=MessageResponse,
    summary="Automated Commons Sync",
    description="Scheduler entry point for the Commons-Libraries sync.",
    response_description="Summary of the sync.",
)
async def automated_sync(service: LibrarySyncServiceDep, user: CampusAdminDep) -> MessageResponse:
    logger.info("Automated Commons-Libraries sync started")
    return MessageResponse(msg=await service.sync())
