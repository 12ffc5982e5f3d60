"""
Adoption Report Endpoints.

Anyone may report using a Commons book; super administrators review and
prune the reports.
"""

from fastapi import APIRouter

from conductor.core.models.io.adoption_reports import (
    AdoptionReportCreate,
    AdoptionReportListResponse,
    AdoptionReportRead,
)
from conductor.core.models.io.common import MessageResponse
from conductor.server.services.deps import AdoptionReportServiceDep, SuperAdminDep

router = APIRouter()


@router.post(
    "/adoptionreport",
    response_model=MessageResponse,
    status_code=201,
    summary="Submit Adoption Report",
    description="Report the adoption of a Commons book by an instructor or a student.",
    response_description="Confirmation message.",
    responses={400: {"description": "Invalid report"}},
)
async def submit_adoption_report(
    payload: AdoptionReportCreate, service: AdoptionReportServiceDep
) -> MessageResponse:
    await service.submit(payload)
    return MessageResponse(msg="Adoption report succesfully submitted.")


@router.get(
    "/adoptionreports",
    response_model=AdoptionReportListResponse,
    summary="List Adoption Reports",
    description="Retrieve every adoption report, newest first.",
    response_description="List of reports.",
)
async def list_adoption_reports(service: AdoptionReportServiceDep, user: SuperAdminDep) -> AdoptionReportListResponse:
    reports = await service.list_reports()
    return AdoptionReportListResponse(reports=[AdoptionReportRead.model_validate(r) for r in reports])


@router.delete(
    "/adoptionreport/{report_id}",
    response_model=MessageResponse,
    summary="Delete Adoption Report",
    description="Delete an adoption report.",
    response_description="Confirmation message.",
    responses={404: {"description": "Report not found"}},
)
async def delete_adoption_report(
    report_id: str, service: AdoptionReportServiceDep, user: SuperAdminDep
) -> MessageResponse:
    await service.delete(report_id)
    return MessageResponse(msg="Adoption report successfully deleted.")
