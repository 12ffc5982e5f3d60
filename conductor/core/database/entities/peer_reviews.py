"""
Peer review entity models.

Rubrics define the prompts a reviewer answers; a PeerReview stores a snapshot
of the rubric's headings, text blocks and prompts together with the answers,
so later rubric edits never alter submitted reviews.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now

PROMPT_TYPES = ("3-likert", "5-likert", "7-likert", "text", "dropdown", "checkbox")
AUTHOR_TYPES = ("student", "instructor")
LIKERT_POINTS = {"3-likert": 3, "5-likert": 5, "7-likert": 7}


class PeerReviewRubric(Base, table=True):
    """Table: peer_review_rubrics"""

    __tablename__ = "peer_review_rubrics"
    __table_args__ = ({"extend_existing": True},)

    rubric_id: str = Field(primary_key=True)
    org_id: str = Field(index=True)
    rubric_title: str
    is_org_default: bool = Field(default=False)
    headings: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    text_blocks: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    prompts: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"PeerReviewRubric(id={self.rubric_id}, title={self.rubric_title!r})"


class PeerReview(Base, table=True):
    """Table: peer_reviews"""

    __tablename__ = "peer_reviews"
    __table_args__ = ({"extend_existing": True},)

    peer_review_id: str = Field(primary_key=True)
    project_id: str = Field(index=True)
    author: str = Field(description="Member UUID, or 'First Last' for anonymous reviewers")
    author_email: Optional[str] = Field(default=None)
    anon_author: bool = Field(default=False)
    author_type: str = Field(description="student | instructor")
    rubric_id: str
    rubric_title: str
    rating: Optional[float] = Field(default=None)
    headings: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    text_blocks: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    responses: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"PeerReview(id={self.peer_review_id}, project={self.project_id}, rating={self.rating})"
