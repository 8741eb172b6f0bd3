"""Shared pytest fixtures for apikit test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def fresh_problem_registry(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Rebuild the process-wide registry from a clean environment per test."""
    from apikit.core.config import get_problem_settings
    from apikit.core.problems import get_problem_registry

    monkeypatch.delenv("APIKIT_PROBLEM_BASE_URL", raising=False)
    monkeypatch.delenv("APIKIT_PROBLEM_ERROR_PATHS", raising=False)
    get_problem_settings.cache_clear()
    get_problem_registry.cache_clear()
    yield
    get_problem_settings.cache_clear()
    get_problem_registry.cache_clear()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Provide an API test client for the example service."""
    from apikit.main import app

    with TestClient(app) as test_client:
        yield test_client
