"""Adoption report I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field

from .common import APIModel, ConductorResponse

NumberInput = Optional[Union[int, str]]


class AdoptionResource(APIModel):
    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    library: str = Field(min_length=1)
    link: Optional[str] = None


class InstructorDetails(APIModel):
    is_libre_net: Optional[str] = Field(default=None, alias="isLibreNet")
    institution: Optional[str] = None
    class_name: Optional[str] = Field(default=None, alias="class")
    term: Optional[str] = None
    students: NumberInput = None
    replace_cost: NumberInput = None
    print_cost: NumberInput = None
    access: Optional[List[str]] = None


class StudentDetails(APIModel):
    use: Optional[str] = None
    institution: Optional[str] = None
    class_name: Optional[str] = Field(default=None, alias="class")
    instructor: Optional[str] = None
    quality: NumberInput = None
    navigation: NumberInput = None
    print_cost: NumberInput = None
    access: Optional[List[str]] = None


class AdoptionReportCreate(APIModel):
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: str = Field(min_length=1)
    role: Literal["instructor", "student"]
    resource: AdoptionResource
    instructor: Optional[InstructorDetails] = None
    student: Optional[StudentDetails] = None
    comments: Optional[str] = None


class AdoptionReportRead(APIModel):
    report_id: str = Field(alias="reportID")
    email: str
    name: str
    role: str
    resource: Dict[str, Any]
    instructor: Optional[Dict[str, Any]] = None
    student: Optional[Dict[str, Any]] = None
    comments: Optional[str] = None
    created_at: datetime


class AdoptionReportListResponse(ConductorResponse):
    reports: List[AdoptionReportRead]
