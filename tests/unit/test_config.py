"""Unit tests for problem settings loaded from the environment."""

from __future__ import annotations

import pytest

from apikit.core.config import BLANK_URL
from apikit.core.config import get_problem_settings
from apikit.core.problems import get_problem_type_url


def test_settings_default_to_blank_base_url() -> None:
    settings = get_problem_settings()

    assert settings.base_url == BLANK_URL
    assert settings.error_type_paths == {}


def test_settings_read_base_url_and_error_paths(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APIKIT_PROBLEM_BASE_URL", "https://api.example.com")
    monkeypatch.setenv(
        "APIKIT_PROBLEM_ERROR_PATHS",
        "validation_error=/docs/validation, teapot_error = /docs/teapot ,",
    )

    settings = get_problem_settings()

    assert settings.base_url == "https://api.example.com"
    assert settings.error_type_paths == {
        "validation_error": "/docs/validation",
        "teapot_error": "/docs/teapot",
    }
    assert settings.safe_for_logging()["base_url"] == "https://api.example.com"
    assert get_problem_type_url("teapot_error") == "https://api.example.com/docs/teapot"


def test_settings_reject_malformed_error_paths(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APIKIT_PROBLEM_ERROR_PATHS", "validation_error")

    with pytest.raises(ValueError, match="invalid error path entry"):
        get_problem_settings()
