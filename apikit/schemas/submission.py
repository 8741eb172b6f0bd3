"""Pydantic schemas for the submission example endpoint."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import Field

from apikit.request import RequestModel


class SubmitRequest(RequestModel):
    """Submission payload; ``id`` is bound from the route."""

    id: int = Field(gt=0)
    name: str = Field(min_length=3)
    age: int = Field(ge=1)


class SubmitResponse(BaseModel):
    """Submission response payload."""

    id: int
    name: str
    age: int
