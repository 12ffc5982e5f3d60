"""
Project Endpoints.

This module handles projects and the batch AI metadata jobs run against a
project's linked book. Batch jobs are scheduled as background tasks; clients
poll the job list for progress.
"""

from fastapi import APIRouter, BackgroundTasks

from conductor.core.logging_config import get_logger
from conductor.core.models.io.projects import (
    BatchAIMetadataRequest,
    BatchJobListResponse,
    BatchJobRead,
    BatchJobResponse,
    BatchUpdateRequest,
    ProjectCreate,
    ProjectCreatedResponse,
    ProjectRead,
    ProjectResponse,
    ProjectUpdate,
)
from conductor.server.services.deps import (
    ActingUserDep,
    BatchJobRunnerDep,
    BatchJobServiceDep,
    ProjectServiceDep,
    UserDep,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ProjectCreatedResponse,
    status_code=201,
    summary="Create Project",
    description="Create a project; the requesting user becomes its lead.",
    response_description="The new project identifier.",
    responses={400: {"description": "Invalid payload or book already linked to another project"}},
)
async def create_project(payload: ProjectCreate, service: ProjectServiceDep, user: UserDep) -> ProjectCreatedResponse:
    project = await service.create(payload, user)
    return ProjectCreatedResponse(msg="New project created.", project_id=project.project_id)


@router.get(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Get Project",
    description="Retrieve a public project, or a private one the user belongs to.",
    response_description="The project.",
    responses={403: {"description": "No access to the project"}, 404: {"description": "Project not found"}},
)
async def get_project(project_id: str, service: ProjectServiceDep, user: ActingUserDep) -> ProjectResponse:
    project = await service.get(project_id, user)
    return ProjectResponse(project=ProjectRead.model_validate(project))


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Update Project",
    description="Apply a partial update to a project. Requires project administrator rights.",
    response_description="The updated project.",
)
async def update_project(
    project_id: str, payload: ProjectUpdate, service: ProjectServiceDep, user: UserDep
) -> ProjectResponse:
    project = await service.update(project_id, payload, user)
    return ProjectResponse(project=ProjectRead.model_validate(project))


# =====================================================================
# Batch AI metadata jobs
# =====================================================================


@router.post(
    "/{project_id}/book/batch-ai-metadata",
    response_model=BatchJobResponse,
    summary="Start Batch AI Metadata Job",
    description="Generate summaries and/or tags for every page of the project's book.",
    response_description="The scheduled job.",
    responses={409: {"description": "A job is already running for this project"}},
)
async def start_batch_ai_metadata(
    project_id: str,
    payload: BatchAIMetadataRequest,
    background_tasks: BackgroundTasks,
    service: BatchJobServiceDep,
    runner: BatchJobRunnerDep,
    user: UserDep,
) -> BatchJobResponse:
    job = await service.start_ai_metadata(project_id, payload, user)
    background_tasks.add_task(runner.run, job.job_id)
    return BatchJobResponse(msg="Batch job started.", job=BatchJobRead.model_validate(job))


@router.post(
    "/{project_id}/book/batch-update",
    response_model=BatchJobResponse,
    summary="Start Batch Metadata Update",
    description="Write user-supplied summaries and tags to the pages of the project's book.",
    response_description="The scheduled job.",
    responses={409: {"description": "A job is already running for this project"}},
)
async def start_batch_update(
    project_id: str,
    payload: BatchUpdateRequest,
    background_tasks: BackgroundTasks,
    service: BatchJobServiceDep,
    runner: BatchJobRunnerDep,
    user: UserDep,
) -> BatchJobResponse:
    job = await service.start_user_update(project_id, payload, user)
    background_tasks.add_task(runner.run, job.job_id, list(payload.pages))
    return BatchJobResponse(msg="Batch job started.", job=BatchJobRead.model_validate(job))


@router.get(
    "/{project_id}/book/batch-jobs",
    response_model=BatchJobListResponse,
    summary="List Batch Jobs",
    description="Retrieve the project's batch jobs, newest first.",
    response_description="List of jobs.",
)
async def list_batch_jobs(project_id: str, service: BatchJobServiceDep, user: UserDep) -> BatchJobListResponse:
    jobs = await service.list_jobs(project_id, user)
    return BatchJobListResponse(jobs=[BatchJobRead.model_validate(job) for job in jobs])
