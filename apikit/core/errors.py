"""Request error hierarchy and problem-details exception handlers."""

from __future__ import annotations

from http import HTTPStatus
import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi import Response
from fastapi import status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from apikit.core.problems import BAD_REQUEST_ERROR
from apikit.core.problems import NOT_FOUND_ERROR
from apikit.core.problems import SERVER_ERROR
from apikit.core.problems import VALIDATION_ERROR
from apikit.core.problems import ProblemTypeRegistry
from apikit.core.problems import get_problem_registry
from apikit.response import new_problem_details
from apikit.response import send_problem
from apikit.schemas.problem import ProblemDetails
from apikit.validation import ValidationReport

logger = logging.getLogger(__name__)


class RequestError(Exception):
    """Base error for requests rejected before reaching handler code.

    The error response is rendered once, on construction, and exposed as
    ``response``; callers return it instead of writing their own.
    """

    def __init__(
        self,
        *,
        problem: ProblemDetails,
        registry: ProblemTypeRegistry | None = None,
    ) -> None:
        super().__init__(problem.detail or problem.title)
        self.problem = problem
        self.response = send_problem(problem, registry=registry)


class BodyDecodeError(RequestError):
    """The request body is not a JSON object matching the target fields."""

    def __init__(self, *, detail: str, registry: ProblemTypeRegistry | None = None) -> None:
        registry = registry or get_problem_registry()
        super().__init__(
            problem=new_problem_details(
                status.HTTP_400_BAD_REQUEST,
                "Invalid Request",
                detail,
                problem_type=registry.resolve(BAD_REQUEST_ERROR),
            ),
            registry=registry,
        )


class MissingParameterError(RequestError):
    """A required route parameter was not supplied."""

    def __init__(self, *, key: str, registry: ProblemTypeRegistry | None = None) -> None:
        registry = registry or get_problem_registry()
        self.key = key
        super().__init__(
            problem=new_problem_details(
                status.HTTP_400_BAD_REQUEST,
                "Missing Parameter",
                f"Parameter {key} not found in request",
                problem_type=registry.resolve(BAD_REQUEST_ERROR),
            ),
            registry=registry,
        )


class ParameterAssignmentError(RequestError):
    """The request target rejected a route parameter value."""

    def __init__(
        self,
        *,
        key: str,
        error: Exception,
        registry: ProblemTypeRegistry | None = None,
    ) -> None:
        registry = registry or get_problem_registry()
        self.key = key
        super().__init__(
            problem=new_problem_details(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Parameter Error",
                f"Failed to set field {key}",
                problem_type=registry.resolve(SERVER_ERROR),
                extensions={"error": str(error)},
            ),
            registry=registry,
        )


class ValidationFailedError(RequestError):
    """One or more declared field constraints were violated."""

    def __init__(
        self,
        *,
        report: ValidationReport,
        registry: ProblemTypeRegistry | None = None,
    ) -> None:
        registry = registry or get_problem_registry()
        self.report = report
        super().__init__(
            problem=new_problem_details(
                status.HTTP_400_BAD_REQUEST,
                "Validation Error",
                "One or more fields failed validation.",
                problem_type=registry.resolve(VALIDATION_ERROR),
                extensions={
                    "errors": [item.model_dump() for item in report.field_errors()],
                },
            ),
            registry=registry,
        )


def registry_for(request: Request) -> ProblemTypeRegistry:
    """Return the registry attached to the request's app, else the process-wide one."""
    state = getattr(request.scope.get("app"), "state", None)
    return getattr(state, "problem_registry", None) or get_problem_registry()


def _http_error_category(status_code: int) -> str | None:
    if status_code == status.HTTP_404_NOT_FOUND:
        return NOT_FOUND_ERROR
    if status_code == status.HTTP_400_BAD_REQUEST:
        return BAD_REQUEST_ERROR
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return SERVER_ERROR
    return None


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Request Failed"


async def request_error_handler(request: Request, exc: RequestError) -> Response:
    """Return the response rendered when the pipeline rejected the request."""

    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return exc.response


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    """Normalize FastAPI validation errors to a validation problem."""

    report = ValidationReport.from_errors(exc.errors(), sectioned=True)
    return ValidationFailedError(report=report, registry=registry_for(request)).response


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Normalize HTTP exceptions to problem details."""

    registry = registry_for(request)
    title = _status_phrase(exc.status_code)
    detail = exc.detail if isinstance(exc.detail, str) and exc.detail != title else None
    category = _http_error_category(exc.status_code)
    problem = new_problem_details(
        exc.status_code,
        title,
        detail,
        problem_type=registry.resolve(category) if category else None,
    )
    return send_problem(problem, headers=exc.headers, registry=registry)


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Avoid leaking internal exceptions while keeping response shape stable."""

    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    registry = registry_for(request)
    problem = new_problem_details(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        problem_type=registry.resolve(SERVER_ERROR),
    )
    return send_problem(problem, registry=registry)


def register_error_handlers(app: FastAPI, registry: ProblemTypeRegistry | None = None) -> None:
    """Attach the problem-details error handlers to a FastAPI app instance.

    When ``registry`` is given it is stored on ``app.state`` and used for
    every problem type the handlers build.
    """

    if registry is not None:
        app.state.problem_registry = registry
    app.add_exception_handler(RequestError, request_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
