"""Unit tests for the problem-details exception handlers."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from apikit.core.errors import register_error_handlers
from apikit.core.problems import ProblemTypeRegistry


def _build_client(registry: ProblemTypeRegistry | None = None) -> TestClient:
    app = FastAPI()
    register_error_handlers(app, registry=registry)

    @app.get("/query")
    def query(limit: int) -> dict[str, int]:
        return {"limit": limit}

    @app.get("/http")
    def http_error() -> None:
        raise StarletteHTTPException(status_code=404, detail="Item not found")

    @app.get("/conflict")
    def conflict() -> None:
        raise StarletteHTTPException(status_code=409)

    @app.post("/only-post")
    def only_post() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/boom")
    def boom() -> None:
        raise RuntimeError("database password is hunter2")

    return TestClient(app, raise_server_exceptions=False)


def test_request_validation_errors_are_normalized_to_problem() -> None:
    client = _build_client()

    response = client.get("/query")

    assert response.status_code == 400
    assert response.headers["content-type"] == "application/problem+json"
    payload = response.json()
    assert payload["title"] == "Validation Error"
    assert payload["type"] == "/errors/validation-error"
    assert payload["extensions"]["errors"] == [
        {"field": "limit", "message": "limit failed required validation"},
    ]


def test_http_errors_are_wrapped_in_problem() -> None:
    client = _build_client()

    response = client.get("/http")

    assert response.status_code == 404
    assert response.json() == {
        "type": "/errors/not-found",
        "title": "Not Found",
        "status": 404,
        "detail": "Item not found",
    }


def test_uncategorized_http_errors_use_blank_type() -> None:
    client = _build_client()

    response = client.get("/conflict")

    assert response.status_code == 409
    assert response.json() == {"type": "about:blank", "title": "Conflict", "status": 409}


def test_http_error_headers_are_preserved() -> None:
    client = _build_client()

    response = client.get("/only-post")

    assert response.status_code == 405
    assert response.headers["allow"] == "POST"
    assert response.json()["title"] == "Method Not Allowed"


def test_unhandled_errors_do_not_leak_details() -> None:
    client = _build_client()

    response = client.get("/boom")

    assert response.status_code == 500
    payload = response.json()
    assert payload == {
        "type": "/errors/server-error",
        "title": "Internal Server Error",
        "status": 500,
    }


def test_registry_passed_at_registration_is_used() -> None:
    client = _build_client(ProblemTypeRegistry(base_url="https://api.example.com"))

    response = client.get("/http")

    assert response.json()["type"] == "https://api.example.com/errors/not-found"
