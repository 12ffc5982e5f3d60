"""C-ID descriptor I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from .common import APIModel, ConductorResponse


class CIDDescriptorRead(APIModel):
    descriptor: str
    title: str
    description: str = ""
    approved: Optional[datetime] = None
    expires: Optional[datetime] = None


class CIDDescriptorListResponse(ConductorResponse):
    descriptors: List[CIDDescriptorRead]
