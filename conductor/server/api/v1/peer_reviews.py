"""
Peer Review Endpoints.

This module handles peer review rubrics and the reviews submitted against
projects.
"""

from typing import Optional

from fastapi import APIRouter, Query

from conductor.core.models.io.common import MessageResponse
from conductor.core.models.io.peer_reviews import (
    OrgDefaultRubricResponse,
    PeerReviewAccessResponse,
    PeerReviewCreate,
    PeerReviewCreatedResponse,
    PeerReviewRead,
    PeerReviewResponse,
    ProjectPeerReviewsResponse,
    RubricListResponse,
    RubricRead,
    RubricResponse,
    RubricSavedResponse,
    RubricSaveRequest,
)
from conductor.server.core.config import settings
from conductor.server.services.deps import ActingUserDep, CampusAdminDep, PeerReviewServiceDep, UserDep

router = APIRouter()


# =====================================================================
# Rubrics
# =====================================================================


@router.get(
    "/peerreview/rubric",
    response_model=RubricResponse,
    summary="Get Rubric",
    description="Retrieve a rubric by identifier, defaulting to this organization's rubric.",
    response_description="The rubric.",
    responses={404: {"description": "Rubric not found"}},
)
async def get_rubric(
    service: PeerReviewServiceDep, rubric_id: Optional[str] = Query(default=None, alias="rubricID")
) -> RubricResponse:
    rubric = await service.resolve_rubric(rubric_id or settings.org_id, do_resolution=False)
    return RubricResponse(rubric=RubricRead.model_validate(rubric))


@router.get(
    "/peerreview/rubrics",
    response_model=RubricListResponse,
    summary="List Rubrics",
    description="Retrieve every rubric sorted by title.",
    response_description="List of rubrics.",
)
async def list_rubrics(service: PeerReviewServiceDep) -> RubricListResponse:
    return RubricListResponse(rubrics=[RubricRead.model_validate(r) for r in await service.list_rubrics()])


@router.get(
    "/peerreview/rubric/orgdefault",
    response_model=OrgDefaultRubricResponse,
    summary="Check Organization Default Rubric",
    description="Report whether this organization has its own default rubric.",
    response_description="Whether an organization default exists.",
)
async def get_org_default_rubric(service: PeerReviewServiceDep) -> OrgDefaultRubricResponse:
    return OrgDefaultRubricResponse(has_org_default=await service.has_org_default())


@router.get(
    "/peerreview/projectrubric",
    response_model=RubricResponse,
    summary="Get Project Rubric",
    description="Resolve the rubric a project's reviews are collected with.",
    response_description="The resolved rubric.",
)
async def get_project_rubric(
    service: PeerReviewServiceDep, project_id: str = Query(alias="projectID")
) -> RubricResponse:
    rubric = await service.get_project_rubric(project_id)
    return RubricResponse(rubric=RubricRead.model_validate(rubric))


@router.post(
    "/peerreview/rubric",
    response_model=RubricSavedResponse,
    summary="Save Rubric",
    description="Create or edit a peer review rubric.",
    response_description="The rubric identifier.",
    responses={400: {"description": "Invalid rubric"}, 404: {"description": "Rubric to edit not found"}},
)
async def save_rubric(
    payload: RubricSaveRequest, service: PeerReviewServiceDep, user: CampusAdminDep
) -> RubricSavedResponse:
    rubric_id, created = await service.save_rubric(payload, user)
    msg = "Peer Review Rubric successfully created." if created else "Peer Review Rubric successfully updated."
    return RubricSavedResponse(msg=msg, rubric_id=rubric_id)


@router.delete(
    "/peerreview/rubric/{rubric_id}",
    response_model=MessageResponse,
    summary="Delete Rubric",
    description="Delete a rubric. Requires campus administrator rights in the rubric's organization.",
    response_description="Confirmation message.",
)
async def delete_rubric(rubric_id: str, service: PeerReviewServiceDep, user: UserDep) -> MessageResponse:
    await service.delete_rubric(rubric_id, user)
    return MessageResponse(msg="Rubric successfully deleted.")


# =====================================================================
# Reviews
# =====================================================================


@router.get(
    "/peerreview/access",
    response_model=PeerReviewAccessResponse,
    summary="Check Peer Review Access",
    description="Check whether the requester may submit a review for a project.",
    response_description="Access flag.",
    responses={403: {"description": "Reviews restricted to the project team"}},
)
async def check_peer_review_access(
    service: PeerReviewServiceDep, user: ActingUserDep, project_id: str = Query(alias="projectID")
) -> PeerReviewAccessResponse:
    return PeerReviewAccessResponse(access=await service.check_access(project_id, user))


@router.get(
    "/peerreviews",
    response_model=ProjectPeerReviewsResponse,
    summary="Get Project Peer Reviews",
    description="Retrieve a project's reviews and their average rating.",
    response_description="Reviews and the average rating.",
)
async def get_project_peer_reviews(
    service: PeerReviewServiceDep, user: ActingUserDep, project_id: str = Query(alias="projectID")
) -> ProjectPeerReviewsResponse:
    reviews, average = await service.get_project_reviews(project_id, user)
    return ProjectPeerReviewsResponse(
        reviews=[PeerReviewRead.model_validate(r) for r in reviews], average_rating=average
    )


@router.get(
    "/peerreview",
    response_model=PeerReviewResponse,
    summary="Get Peer Review",
    description="Retrieve a single peer review.",
    response_description="The review.",
)
async def get_peer_review(
    service: PeerReviewServiceDep, user: ActingUserDep, peer_review_id: str = Query(alias="peerReviewID")
) -> PeerReviewResponse:
    review = await service.get_review(peer_review_id, user)
    return PeerReviewResponse(review=PeerReviewRead.model_validate(review))


@router.post(
    "/peerreview",
    response_model=PeerReviewCreatedResponse,
    status_code=201,
    summary="Submit Peer Review",
    description="Submit a review for a project, from a team member or, where allowed, an outside reviewer.",
    response_description="The new review identifier.",
    responses={400: {"description": "Missing or invalid responses"}, 403: {"description": "Not allowed to review"}},
)
async def create_peer_review(
    payload: PeerReviewCreate, service: PeerReviewServiceDep, user: ActingUserDep
) -> PeerReviewCreatedResponse:
    peer_review_id = await service.create_review(payload, user)
    return PeerReviewCreatedResponse(msg="Successfully submitted new Peer Review!", peer_review_id=peer_review_id)


@router.delete(
    "/peerreview/{peer_review_id}",
    response_model=MessageResponse,
    summary="Delete Peer Review",
    description="Delete a review. Allowed for project administrators and the review's author.",
    response_description="Confirmation message.",
)
async def delete_peer_review(peer_review_id: str, service: PeerReviewServiceDep, user: UserDep) -> MessageResponse:
    await service.delete_review(peer_review_id, user)
    return MessageResponse(msg="Successfully deleted Peer Review.")
