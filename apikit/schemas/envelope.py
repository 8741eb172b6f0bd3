"""Success envelope schemas."""

from __future__ import annotations

from typing import Any
from typing import Generic
from typing import TypeVar

from pydantic import BaseModel
from pydantic import SerializerFunctionWrapHandler
from pydantic import model_serializer

DataT = TypeVar("DataT")


def drop_empty_members(model: BaseModel, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
    """Serialize ``model`` and omit its own top-level ``None`` members.

    Nested values are left untouched, so ``None`` inside a payload survives.
    """
    return {key: value for key, value in handler(model).items() if value is not None}


class Meta(BaseModel):
    """Pagination metadata attached to list responses."""

    page: int | None = None
    page_size: int | None = None
    total_pages: int | None = None
    total_items: int | None = None

    @model_serializer(mode="wrap")
    def serialize_members(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return drop_empty_members(self, handler)


class ResponseEnvelope(BaseModel, Generic[DataT]):
    """Top-level success envelope wrapping the response payload."""

    data: DataT | None = None
    meta: Meta | None = None

    @model_serializer(mode="wrap")
    def serialize_members(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        return drop_empty_members(self, handler)
