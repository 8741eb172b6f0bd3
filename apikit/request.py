"""Request pipeline: body decoding, route parameter binding and validation."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from typing import Protocol
from typing import TypeVar
from typing import runtime_checkable
import json
import logging

from fastapi import Request
from pydantic import BaseModel
from pydantic import TypeAdapter
from pydantic import ValidationError

from apikit.core.errors import BodyDecodeError
from apikit.core.errors import MissingParameterError
from apikit.core.errors import ParameterAssignmentError
from apikit.core.errors import ValidationFailedError
from apikit.core.errors import registry_for
from apikit.core.problems import ProblemTypeRegistry
from apikit.validation import ValidationFailure
from apikit.validation import coerce
from apikit.validation import format_location

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ParamExtractor = Callable[[Request, str], str]

# pydantic error types raised when a JSON value has the wrong type for its
# field, or would lose precision when coerced to it.
_TYPE_MISMATCH_SUFFIXES = ("_type", "_parsing")
_LOSSY_COERCION_TYPES = frozenset({"int_from_float", "int_parsing_size"})


@runtime_checkable
class ParamSetter(Protocol):
    """Request targets that accept route parameters by field name."""

    def set_field(self, name: str, value: str) -> None:
        """Assign ``value`` to ``name``, raising when it cannot be coerced."""
        ...


class RequestModel(BaseModel):
    """Base request target with a lenient ``set_field``.

    Unknown names are ignored. Known names are coerced to the field's
    annotated type; declared constraints are checked later by validation.
    """

    def set_field(self, name: str, value: str) -> None:
        field = type(self).model_fields.get(name)
        if field is None:
            logger.debug("Parameter %s cannot be set on %s", name, type(self).__name__)
            return
        setattr(self, name, TypeAdapter(field.annotation).validate_python(value))


def path_param_extractor(request: Request, key: str) -> str:
    """Read ``key`` from the path parameters matched by the router."""
    value = request.path_params.get(key)
    return "" if value is None else str(value)


def query_param_extractor(request: Request, key: str) -> str:
    """Read ``key`` from the query string."""
    return request.query_params.get(key, "")


def _is_type_mismatch(error_type: str) -> bool:
    return error_type.endswith(_TYPE_MISMATCH_SUFFIXES) or error_type in _LOSSY_COERCION_TYPES


def _decode_body(raw: bytes, target_type: type[ModelT], registry: ProblemTypeRegistry) -> ModelT:
    try:
        payload: Any = json.loads(raw)
    except ValueError as exc:
        raise BodyDecodeError(detail=str(exc), registry=registry) from exc

    if not isinstance(payload, dict):
        raise BodyDecodeError(
            detail=f"request body must be a JSON object, got {type(payload).__name__}",
            registry=registry,
        )

    # Missing fields and constraint violations are reported by validation,
    # after route parameters are bound.
    try:
        target_type.model_validate(payload)
    except ValidationError as exc:
        for issue in exc.errors():
            if _is_type_mismatch(issue["type"]):
                detail = f"{format_location(issue['loc'])}: {issue['msg']}"
                raise BodyDecodeError(detail=detail, registry=registry) from exc

    return target_type.model_construct(**payload)


async def parse_request(
    request: Request,
    target_type: type[ModelT],
    param_extractor: ParamExtractor,
    *path_params: str,
    registry: ProblemTypeRegistry | None = None,
) -> ModelT:
    """Build and validate a ``target_type`` instance from ``request``.

    The JSON body (when present) is decoded first, then every name in
    ``path_params`` is read with ``param_extractor`` and bound with the
    target's ``set_field``, then the declared constraints are validated.

    Raises a :class:`~apikit.core.errors.RequestError` subclass on the first
    failure. Its ``response`` is the one error response for this request.
    """
    registry = registry or registry_for(request)

    raw = await request.body()
    target = _decode_body(raw, target_type, registry) if raw else None
    if target is None:
        target = target_type.model_construct()

    for key in path_params:
        value = param_extractor(request, key)
        if not value:
            raise MissingParameterError(key=key, registry=registry)
        try:
            target.set_field(key, value)
        except Exception as exc:
            logger.warning("Failed to set field %s on %s: %s", key, target_type.__name__, exc)
            raise ParameterAssignmentError(key=key, error=exc, registry=registry) from exc

    try:
        return coerce(target)
    except ValidationFailure as exc:
        raise ValidationFailedError(report=exc.report, registry=registry) from exc
