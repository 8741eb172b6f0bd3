"""Uniform JSON response writer for success envelopes and problem details."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
import logging

from fastapi import Response
from fastapi import status
from pydantic_core import PydanticSerializationError

from apikit.core.config import BLANK_URL
from apikit.core.problems import SERVER_ERROR
from apikit.core.problems import ProblemTypeRegistry
from apikit.core.problems import get_problem_registry
from apikit.schemas.envelope import Meta
from apikit.schemas.envelope import ResponseEnvelope
from apikit.schemas.problem import PROBLEM_MEDIA_TYPE
from apikit.schemas.problem import ProblemDetails

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"


def new_problem_details(
    status_code: int,
    title: str,
    detail: str | None = None,
    *,
    problem_type: str | None = None,
    instance: str | None = None,
    extensions: dict[str, Any] | None = None,
) -> ProblemDetails:
    """Build a problem document, falling back to ``about:blank`` as its type."""
    return ProblemDetails(
        type=problem_type or BLANK_URL,
        title=title,
        status=status_code,
        detail=detail,
        instance=instance,
        extensions=extensions,
    )


def send_problem(
    problem: ProblemDetails,
    *,
    headers: Mapping[str, str] | None = None,
    registry: ProblemTypeRegistry | None = None,
) -> Response:
    """Render ``problem`` with its own status and the problem media type."""
    try:
        body = problem.model_dump_json()
    except (PydanticSerializationError, TypeError) as exc:
        logger.error("Failed to serialize problem %r: %s", problem.title, exc)
        return _send_fallback(exc, registry=registry)
    return Response(
        content=body,
        status_code=problem.status,
        headers=dict(headers) if headers else None,
        media_type=PROBLEM_MEDIA_TYPE,
    )


def send_response(
    status_code: int,
    data: Any = None,
    problem: ProblemDetails | None = None,
    meta: Meta | None = None,
    *,
    registry: ProblemTypeRegistry | None = None,
) -> Response:
    """Build the single response for one request.

    Error statuses with a problem document render the problem; the problem's
    own status wins over ``status_code``. Anything else is wrapped in the
    ``{"data", "meta"}`` envelope with empty members omitted.
    """
    if status_code >= status.HTTP_400_BAD_REQUEST and problem is not None:
        return send_problem(problem, registry=registry)

    envelope = ResponseEnvelope[Any](data=data, meta=meta)
    try:
        body = envelope.model_dump_json()
    except (PydanticSerializationError, TypeError) as exc:
        logger.error("Failed to serialize response payload: %s", exc)
        return _send_fallback(exc, registry=registry)
    return Response(content=body, status_code=status_code, media_type=JSON_MEDIA_TYPE)


def _send_fallback(exc: Exception, *, registry: ProblemTypeRegistry | None) -> Response:
    try:
        problem = new_problem_details(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            str(exc),
            problem_type=(registry or get_problem_registry()).resolve(SERVER_ERROR),
        )
        return Response(
            content=problem.model_dump_json(),
            status_code=problem.status,
            media_type=PROBLEM_MEDIA_TYPE,
        )
    except Exception:
        logger.exception("Failed to build fallback error response")
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
