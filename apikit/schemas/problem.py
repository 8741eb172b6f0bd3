"""Problem details schemas shared across error responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import SerializerFunctionWrapHandler
from pydantic import model_serializer

from apikit.core.config import BLANK_URL
from apikit.schemas.envelope import drop_empty_members

PROBLEM_MEDIA_TYPE = "application/problem+json"


class FieldError(BaseModel):
    """Single field-level validation issue."""

    field: str
    message: str


class ProblemDetails(BaseModel):
    """RFC 9457 problem details payload."""

    model_config = ConfigDict(frozen=True)

    type: str = BLANK_URL
    title: str
    status: int
    detail: str | None = None
    instance: str | None = None
    extensions: dict[str, Any] | None = None

    @model_serializer(mode="wrap")
    def serialize_members(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return drop_empty_members(self, handler)
