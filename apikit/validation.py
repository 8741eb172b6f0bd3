"""Validation adapter turning pydantic errors into field-indexed reports."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ValidationError

from apikit.schemas.problem import FieldError

ModelT = TypeVar("ModelT", bound=BaseModel)

# pydantic error types renamed after the Field() keyword that declares them.
_CONSTRAINT_NAMES = {
    "missing": "required",
    "string_too_short": "min_length",
    "too_short": "min_length",
    "string_too_long": "max_length",
    "too_long": "max_length",
    "greater_than": "gt",
    "greater_than_equal": "ge",
    "less_than": "lt",
    "less_than_equal": "le",
    "string_pattern_mismatch": "pattern",
    "multiple_of": "multiple_of",
}

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def constraint_name(error_type: str) -> str:
    """Return the declared constraint name for a pydantic error type."""
    return _CONSTRAINT_NAMES.get(error_type, error_type)


def format_message(field: str, constraint: str) -> str:
    """Render one violation as ``<field> failed <constraint> validation``."""
    return f"{field} failed {constraint} validation"


def format_location(location: tuple[Any, ...] | list[Any] | Any, *, sectioned: bool = False) -> str:
    """Join an error location into a dotted field name.

    ``sectioned`` locations come from FastAPI and start with the request
    section (``body``, ``path``, ...), which is dropped.
    """
    if not isinstance(location, (tuple, list)):
        return str(location)

    parts = list(location)
    if sectioned and parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    if parts:
        return ".".join(str(part) for part in parts)

    if not location:
        return "request"

    return str(location[0])


@dataclass(frozen=True)
class ValidationReport:
    """Violations keyed by field name, in traversal order."""

    fields: Mapping[str, tuple[str, ...]]

    @classmethod
    def from_errors(
        cls,
        errors: Iterable[Mapping[str, Any]],
        *,
        sectioned: bool = False,
    ) -> ValidationReport:
        """Build a report from pydantic or FastAPI error dictionaries."""
        collected: dict[str, list[str]] = {}
        for issue in errors:
            field = format_location(issue.get("loc", ()), sectioned=sectioned)
            constraint = constraint_name(str(issue.get("type", "value_error")))
            collected.setdefault(field, []).append(format_message(field, constraint))
        return cls(fields={field: tuple(messages) for field, messages in collected.items()})

    def field_errors(self) -> list[FieldError]:
        """Flatten the report into one entry per violation."""
        return [
            FieldError(field=field, message=message)
            for field, messages in self.fields.items()
            for message in messages
        ]

    def __len__(self) -> int:
        return len(self.fields)


class ValidationFailure(ValueError):
    """Raised by :func:`coerce` when declared constraints are violated."""

    def __init__(self, report: ValidationReport) -> None:
        super().__init__(f"{len(report)} field(s) failed validation")
        self.report = report


def field_values(target: BaseModel) -> dict[str, Any]:
    """Return the declared fields currently set on ``target``."""
    model_fields = type(target).model_fields
    return {name: value for name, value in vars(target).items() if name in model_fields}


def coerce(target: ModelT) -> ModelT:
    """Validate ``target`` and return a fully validated copy.

    Only ``pydantic.ValidationError`` is translated into a report; schema
    errors and failures inside custom validators propagate unchanged.
    """
    if not isinstance(target, BaseModel):
        raise TypeError(f"{type(target).__name__} is not a pydantic model")

    model = type(target)
    try:
        return model.model_validate(field_values(target))
    except ValidationError as exc:
        raise ValidationFailure(ValidationReport.from_errors(exc.errors())) from exc


def validate(target: BaseModel) -> ValidationReport | None:
    """Return the violations of ``target``, or ``None`` when it is valid."""
    try:
        coerce(target)
    except ValidationFailure as exc:
        return exc.report
    return None
