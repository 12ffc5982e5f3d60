"""
Shared I/O building blocks.

API payloads use camelCase keys; Python code uses snake_case attributes. Both
spellings are accepted on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base for every request and response schema."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ConductorResponse(APIModel):
    """Success envelope: every response carries ``err: false``."""

    err: bool = False


class MessageResponse(ConductorResponse):
    msg: str


class ErrorResponse(APIModel):
    """Error envelope returned for every failed request."""

    err: bool = True
    err_msg: str
    err_code: str | None = None
