"""Adoption report entity: a self-reported use of a Commons book."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class AdoptionReport(Base, table=True):
    """Table: adoption_reports"""

    __tablename__ = "adoption_reports"
    __table_args__ = ({"extend_existing": True},)

    report_id: str = Field(primary_key=True)
    email: str
    name: str
    role: str = Field(description="instructor | student")
    resource: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON, description="{id, title, library, link}")
    instructor: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    student: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    comments: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"AdoptionReport(id={self.report_id}, role={self.role}, resource={self.resource.get('id')})"
