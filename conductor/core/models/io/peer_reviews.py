"""
Peer review and rubric I/O models.

Rubric save payloads are kept loose here; trimming, ordering and dropdown
option rules are enforced by the peer review service so each failure maps to
its own error code.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field

from .common import APIModel, ConductorResponse


class RubricRead(APIModel):
    rubric_id: str = Field(alias="rubricID")
    org_id: str = Field(alias="orgID")
    rubric_title: str
    is_org_default: bool = False
    headings: List[Dict[str, Any]] = Field(default_factory=list)
    text_blocks: List[Dict[str, Any]] = Field(default_factory=list)
    prompts: List[Dict[str, Any]] = Field(default_factory=list)


class RubricSaveRequest(APIModel):
    mode: Literal["create", "edit"]
    rubric_id: Optional[str] = Field(default=None, alias="rubricID")
    rubric_title: Optional[str] = None
    org_default: bool = False
    headings: List[Dict[str, Any]] = Field(default_factory=list)
    text_blocks: List[Dict[str, Any]] = Field(default_factory=list)
    prompts: List[Dict[str, Any]] = Field(default_factory=list)


class PromptResponseIn(APIModel):
    prompt_id: str = Field(alias="promptID")
    prompt_type: str
    order: int
    likert_response: Optional[int] = None
    text_response: Optional[str] = None
    dropdown_response: Optional[str] = None
    checkbox_response: Optional[bool] = None


class PeerReviewCreate(APIModel):
    project_id: str = Field(alias="projectID")
    author_type: Literal["student", "instructor"]
    rating: Optional[float] = None
    prompt_responses: Optional[List[PromptResponseIn]] = None
    author_first: Optional[str] = None
    author_last: Optional[str] = None
    author_email: Optional[str] = None


class PeerReviewRead(APIModel):
    """A submitted review. The author's email is never exposed."""

    peer_review_id: str = Field(alias="peerReviewID")
    project_id: str = Field(alias="projectID")
    author: str
    anon_author: bool = False
    author_type: str
    rubric_id: str = Field(alias="rubricID")
    rubric_title: str
    rating: Optional[float] = None
    headings: List[Dict[str, Any]] = Field(default_factory=list)
    text_blocks: List[Dict[str, Any]] = Field(default_factory=list)
    responses: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: datetime


class RubricResponse(ConductorResponse):
    rubric: RubricRead


class RubricListResponse(ConductorResponse):
    rubrics: List[RubricRead]


class RubricSavedResponse(ConductorResponse):
    msg: str
    rubric_id: str = Field(alias="rubricID")


class OrgDefaultRubricResponse(ConductorResponse):
    has_org_default: bool


class PeerReviewAccessResponse(ConductorResponse):
    access: bool


class ProjectPeerReviewsResponse(ConductorResponse):
    reviews: List[PeerReviewRead]
    average_rating: Optional[Union[float, int]] = None


class PeerReviewResponse(ConductorResponse):
    review: PeerReviewRead


class PeerReviewCreatedResponse(ConductorResponse):
    msg: str
    peer_review_id: str = Field(alias="peerReviewID")
