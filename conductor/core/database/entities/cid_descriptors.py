"""C-ID course descriptor entity, synced from c-id.net."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class CIDDescriptor(Base, table=True):
    """Table: cid_descriptors"""

    __tablename__ = "cid_descriptors"
    __table_args__ = ({"extend_existing": True},)

    descriptor: str = Field(primary_key=True, description="Descriptor code (e.g. 'MATH 210')")
    title: str
    description: str = Field(default="")
    approved: Optional[datetime] = Field(default=None)
    expires: Optional[datetime] = Field(default=None)

    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"CIDDescriptor({self.descriptor}: {self.title!r})"
