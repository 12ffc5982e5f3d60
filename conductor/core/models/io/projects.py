"""
Project and batch job I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import Field

from .common import APIModel, ConductorResponse


class ProjectRead(APIModel):
    """Schema for reading a project."""

    project_id: str = Field(alias="projectID")
    org_id: str = Field(alias="orgID")
    title: str
    status: str
    visibility: str
    leads: List[str] = Field(default_factory=list)
    liaisons: List[str] = Field(default_factory=list)
    members: List[str] = Field(default_factory=list)
    auditors: List[str] = Field(default_factory=list)
    libre_library: Optional[str] = None
    libre_cover_id: Optional[str] = Field(default=None, alias="libreCoverID")
    author: Optional[str] = None
    license: Optional[str] = None
    project_url: Optional[str] = Field(default=None, alias="projectURL")
    adapt_course_id: Optional[str] = Field(default=None, alias="adaptCourseID")
    rating: float = 0
    allow_anon_pr: bool = Field(default=True, alias="allowAnonPR")
    preferred_pr_rubric: Optional[str] = Field(default=None, alias="preferredPRRubric")
    cid_descriptors: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ProjectCreate(APIModel):
    """Schema for creating a project. The requesting user becomes its lead."""

    title: str = Field(min_length=1, max_length=250)
    visibility: Literal["public", "private"] = "private"
    status: Literal["available", "open", "completed", "flagged"] = "open"
    members: List[str] = Field(default_factory=list)
    libre_library: Optional[str] = None
    libre_cover_id: Optional[str] = Field(default=None, alias="libreCoverID")
    author: Optional[str] = None
    license: Optional[str] = None
    project_url: Optional[str] = Field(default=None, alias="projectURL")
    adapt_course_id: Optional[str] = Field(default=None, alias="adaptCourseID")
    allow_anon_pr: bool = Field(default=True, alias="allowAnonPR")
    preferred_pr_rubric: Optional[str] = Field(default=None, alias="preferredPRRubric")
    cid_descriptors: List[str] = Field(default_factory=list)


class ProjectUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=250)
    visibility: Optional[Literal["public", "private"]] = None
    status: Optional[Literal["available", "open", "completed", "flagged"]] = None
    leads: Optional[List[str]] = None
    liaisons: Optional[List[str]] = None
    members: Optional[List[str]] = None
    auditors: Optional[List[str]] = None
    libre_library: Optional[str] = None
    libre_cover_id: Optional[str] = Field(default=None, alias="libreCoverID")
    author: Optional[str] = None
    license: Optional[str] = None
    project_url: Optional[str] = Field(default=None, alias="projectURL")
    adapt_course_id: Optional[str] = Field(default=None, alias="adaptCourseID")
    allow_anon_pr: Optional[bool] = Field(default=None, alias="allowAnonPR")
    preferred_pr_rubric: Optional[str] = Field(default=None, alias="preferredPRRubric")
    cid_descriptors: Optional[List[str]] = None


class ProjectResponse(ConductorResponse):
    project: ProjectRead


class ProjectCreatedResponse(ConductorResponse):
    msg: str
    project_id: str = Field(alias="projectID")


# =====================================================================
# Batch AI metadata jobs
# =====================================================================


class ResourceOption(APIModel):
    generate: bool = False
    overwrite: bool = False


class GenerateResources(APIModel):
    summaries: ResourceOption = Field(default_factory=ResourceOption)
    tags: ResourceOption = Field(default_factory=ResourceOption)


class BatchAIMetadataRequest(APIModel):
    resources: GenerateResources = Field(default_factory=GenerateResources)


class BatchUpdatePage(APIModel):
    id: str = Field(min_length=1)
    summary: Optional[str] = None
    tags: Optional[List[str]] = None


class BatchUpdateRequest(APIModel):
    pages: List[BatchUpdatePage] = Field(min_length=1)


class BatchJobRead(APIModel):
    job_id: str = Field(alias="jobID")
    project_id: str = Field(alias="projectID")
    type: List[str]
    status: str
    data_source: str
    generate_resources: Dict[str, Dict[str, bool]] = Field(default_factory=dict)
    ran_by: Optional[str] = None
    start_timestamp: datetime
    end_timestamp: Optional[datetime] = None
    meta_results: Dict[str, int] = Field(default_factory=dict)
    successful_meta_pages: int = 0
    failed_meta_pages: int = 0
    error: Optional[str] = None
    logs: List[str] = Field(default_factory=list)


class BatchJobResponse(ConductorResponse):
    msg: str
    job: BatchJobRead


class BatchJobListResponse(ConductorResponse):
    jobs: List[BatchJobRead]
