"""
Batch AI metadata jobs.

A job walks every page of a project's book and writes summaries (the page
overview property) and/or tags, either generated by the AI metadata
generator or supplied by the user. Jobs are created synchronously by
:class:`BatchJobService` and executed in the background by
:class:`BatchJobRunner`, which opens its own database session.

Page calls are made one at a time, each preceded by a random pause, to stay
within the library API and model rate limits.
"""

from __future__ import annotations

import asyncio
import random
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from conductor.core.database.base import utc_now
from conductor.core.database.entities.projects import BatchUpdateJob, Project
from conductor.core.database.repositories import BatchUpdateJobRepository, ProjectRepository
from conductor.core.errors import bad_request, conflict, not_found, unauthorized
from conductor.core.logging_config import get_logger
from conductor.core.models.io.projects import BatchAIMetadataRequest, BatchUpdatePage, BatchUpdateRequest
from conductor.core.monitoring import log_batch_job_event
from conductor.server.core.deps import ActingUser

from .ai_metadata import AIMetadataGenerator
from .libretexts_client import LibreTextsApiError, LibreTextsClient, is_system_tag
from .permissions import is_project_member

logger = get_logger(__name__)

JOB_TYPES = ("summaries", "tags")
GENERATED_JOB_RUNNING = "A batch AI summaries job is already running for this project."
USER_JOB_RUNNING = (
    "A batch job is already running for this project. Please wait for it to finish before starting another."
)


class _EmptyResult(Exception):
    """The model could not produce metadata for a page."""


class BatchJobService:
    """Creates and lists a project's batch jobs."""

    def __init__(self, session: AsyncSession) -> None:
        self.projects = ProjectRepository(session)
        self.jobs = BatchUpdateJobRepository(session)

    async def _get_project(self, project_id: str, user: ActingUser) -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise not_found()
        if not is_project_member(project, user):
            raise unauthorized()
        return project

    async def _get_book_project(self, project_id: str, user: ActingUser) -> Project:
        project = await self._get_project(project_id, user)
        if not project.book_id:
            raise bad_request("err1", "This project does not have a linked book.")
        return project

    async def start_ai_metadata(self, project_id: str, payload: BatchAIMetadataRequest, user: ActingUser) -> BatchUpdateJob:
        project = await self._get_book_project(project_id, user)
        if await self.jobs.get_active(project.project_id) is not None:
            raise conflict(GENERATED_JOB_RUNNING)

        resources = payload.resources
        job_type = [name for name in JOB_TYPES if getattr(resources, name).generate]
        if not job_type:
            raise bad_request("err1")

        job = BatchUpdateJob(
            job_id=str(uuid.uuid4()),
            project_id=project.project_id,
            type=job_type,
            data_source="generated",
            generate_resources=resources.model_dump(),
            ran_by=user.uuid,
        )
        return await self._create(job)

    async def start_user_update(self, project_id: str, payload: BatchUpdateRequest, user: ActingUser) -> BatchUpdateJob:
        project = await self._get_book_project(project_id, user)
        if await self.jobs.get_active(project.project_id) is not None:
            raise conflict(USER_JOB_RUNNING)

        job = BatchUpdateJob(
            job_id=str(uuid.uuid4()),
            project_id=project.project_id,
            type=list(JOB_TYPES),
            data_source="user",
            ran_by=user.uuid,
        )
        return await self._create(job)

    async def _create(self, job: BatchUpdateJob) -> BatchUpdateJob:
        job = await self.jobs.create(job)
        logger.info(f"Created batch job {job.job_id} for project {job.project_id} ({job.data_source}: {job.type})")
        log_batch_job_event(job.job_id, job.project_id, job.status, data_source=job.data_source)
        return job

    async def list_jobs(self, project_id: str, user: ActingUser) -> List[BatchUpdateJob]:
        project = await self._get_project(project_id, user)
        return await self.jobs.list_for_project(project.project_id)


@dataclass
class _JobProgress:
    meta_results: Dict[str, int] = field(default_factory=lambda: {"location": 0, "empty": 0, "internal": 0})
    successful: int = 0
    failed: int = 0
    logs: List[str] = field(default_factory=list)

    def log(self, message: str) -> None:
        logger.debug(message)
        self.logs.append(message)

    def fail(self, page_id: str, reason: str, detail: Any = "") -> None:
        self.meta_results[reason] += 1
        self.failed += 1
        self.log(f"Failed to update page {page_id} with error: {reason} {detail}".rstrip())


class BatchJobRunner:
    """Executes a batch job created by :class:`BatchJobService`.

    Args:
        session_factory: Source of the runner's own database sessions
        client_factory: Builds the library API client used for the run; it is closed afterwards
        generator: AI metadata generator
        max_delay_ms: Upper bound of the random pause before each page call
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        client_factory: Callable[[], LibreTextsClient],
        generator: AIMetadataGenerator,
        max_delay_ms: int = 1000,
    ) -> None:
        self.session_factory = session_factory
        self.client_factory = client_factory
        self.generator = generator
        self.max_delay_ms = max_delay_ms

    async def _pause(self) -> None:
        if self.max_delay_ms > 0:
            await asyncio.sleep(random.uniform(0, self.max_delay_ms) / 1000)

    async def run(self, job_id: str, pages: Optional[Sequence[BatchUpdatePage]] = None) -> None:
        async with self.session_factory() as session:
            jobs = BatchUpdateJobRepository(session)
            job = await jobs.get_by_id(job_id)
            if job is None:
                logger.warning(f"Batch job {job_id} disappeared before it could run")
                return
            project_id = job.project_id

            job.status = "running"
            await jobs.update(job)
            log_batch_job_event(job_id, project_id, job.status)

            progress = _JobProgress()
            client = None
            try:
                project = await ProjectRepository(session).get_by_id(project_id)
                if project is None or not project.book_id:
                    raise ValueError(f"Project {project_id} has no linked book")
                client = self.client_factory()
                progress.log(f"Batch job {job_id} started")
                if job.data_source == "user":
                    await self._apply_user_pages(client, project, pages or [], progress)
                else:
                    await self._generate(client, project, job, progress)
                job.status = "completed"
                progress.log(
                    f"Batch {job_id} finished: {progress.successful} pages succeeded, failed {progress.failed}"
                )
            except Exception as e:
                logger.error(f"Batch job {job_id} failed: {e}", exc_info=True)
                # discard half-applied writes before recording the failure
                await session.rollback()
                job = await jobs.get_by_id(job_id)
                if job is None:
                    logger.warning(f"Batch job {job_id} disappeared while running")
                    return
                job.status = "failed"
                job.error = str(e)
            finally:
                if client is not None:
                    await client.aclose()

            job.end_timestamp = utc_now()
            job.meta_results = dict(progress.meta_results)
            job.successful_meta_pages = progress.successful
            job.failed_meta_pages = progress.failed
            job.logs = list(progress.logs)
            await jobs.update(job)
            log_batch_job_event(
                job_id,
                project_id,
                job.status,
                successful_pages=progress.successful,
                failed_pages=progress.failed,
            )

    async def _apply_user_pages(
        self, client: LibreTextsClient, project: Project, pages: Sequence[BatchUpdatePage], progress: _JobProgress
    ) -> None:
        for page in pages:
            await self._update_page(client, project.libre_library, page.id, page.summary, page.tags, progress)

    async def _generate(
        self, client: LibreTextsClient, project: Project, job: BatchUpdateJob, progress: _JobProgress
    ) -> None:
        library = project.libre_library
        options = job.generate_resources or {}
        page_ids = await client.get_subpage_ids(library, project.libre_cover_id)
        progress.log(f"Found {len(page_ids)} pages in book {project.book_id}")

        for page_id in page_ids:
            await self._pause()
            try:
                text = await client.get_page_text(library, page_id)
            except LibreTextsApiError as e:
                progress.fail(page_id, "location", e)
                continue
            progress.log(f"Collected page text for page ID {page_id} ({len(text)} characters)")
            chunks = self.generator.chunk_text(text)

            summary: Optional[str] = None
            tags: Optional[List[str]] = None
            try:
                if "summaries" in job.type:
                    summary = await self._summary_for(client, library, page_id, chunks, options, progress)
                if "tags" in job.type:
                    tags = await self._tags_for(client, library, page_id, chunks, options, progress)
            except LibreTextsApiError as e:
                progress.fail(page_id, "location", e)
                continue
            except _EmptyResult:
                progress.fail(page_id, "empty")
                continue
            except Exception as e:
                logger.warning(f"AI metadata generation failed for page {page_id}: {e}")
                progress.fail(page_id, "internal", e)
                continue

            if summary is None and tags is None:
                progress.log(f"Kept existing metadata for page {page_id}")
                continue
            await self._update_page(client, library, page_id, summary, tags, progress)

    async def _summary_for(
        self,
        client: LibreTextsClient,
        library: str,
        page_id: str,
        chunks: List[str],
        options: Dict[str, Any],
        progress: _JobProgress,
    ) -> Optional[str]:
        overwrite = bool((options.get("summaries") or {}).get("overwrite"))
        if not overwrite:
            existing = await client.get_page_overview(library, page_id)
            if existing["overview"]:
                return None
        summary = await self.generator.generate_summary(chunks)
        if not summary:
            raise _EmptyResult()
        progress.log(f"Generated summary for page {page_id}")
        return summary

    async def _tags_for(
        self,
        client: LibreTextsClient,
        library: str,
        page_id: str,
        chunks: List[str],
        options: Dict[str, Any],
        progress: _JobProgress,
    ) -> Optional[List[str]]:
        overwrite = bool((options.get("tags") or {}).get("overwrite"))
        if not overwrite:
            existing = await client.get_page_tags(library, page_id)
            if any(not is_system_tag(tag) for tag in existing):
                return None
        tags = await self.generator.generate_tags(chunks)
        if not tags:
            raise _EmptyResult()
        progress.log(f"Generated tags for page {page_id}: {tags}")
        return tags

    async def _update_page(
        self,
        client: LibreTextsClient,
        library: str,
        page_id: str,
        summary: Optional[str],
        tags: Optional[List[str]],
        progress: _JobProgress,
    ) -> None:
        if summary is None and tags is None:
            return
        await self._pause()
        try:
            if summary is not None:
                await client.update_page_overview(library, page_id, summary)
            if tags is not None:
                await client.update_page_tags(library, page_id, tags)
        except LibreTextsApiError as e:
            progress.fail(page_id, "location", e)
            return
        progress.successful += 1
        progress.log(f"Updated page {page_id} successfully")
