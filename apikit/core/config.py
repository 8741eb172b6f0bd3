"""Problem-type configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from functools import lru_cache
import os

BLANK_URL = "about:blank"

DEFAULT_ERROR_TYPE_PATHS: dict[str, str] = {
    "validation_error": "/errors/validation-error",
    "not_found_error": "/errors/not-found",
    "server_error": "/errors/server-error",
    "bad_request_error": "/errors/bad-request",
}


def _parse_error_paths(raw: str | None) -> dict[str, str]:
    """Parse ``category=/path`` pairs separated by commas."""
    if raw is None or not raw.strip():
        return {}

    paths: dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        category, separator, path = pair.partition("=")
        category = category.strip()
        if not separator or not category:
            raise ValueError(f"invalid error path entry: {pair!r}")
        paths[category] = path.strip()
    return paths


@dataclass(frozen=True)
class ProblemSettings:
    """Runtime settings for problem type URIs."""

    base_url: str = BLANK_URL
    error_type_paths: dict[str, str] = field(default_factory=dict)

    def safe_for_logging(self) -> dict[str, str | dict[str, str]]:
        """Return problem settings as plain values for logs."""
        return {
            "base_url": self.base_url,
            "error_type_paths": dict(self.error_type_paths),
        }


@lru_cache(maxsize=1)
def get_problem_settings() -> ProblemSettings:
    """Load problem settings from the environment."""
    return ProblemSettings(
        base_url=os.getenv("APIKIT_PROBLEM_BASE_URL", BLANK_URL),
        error_type_paths=_parse_error_paths(os.getenv("APIKIT_PROBLEM_ERROR_PATHS")),
    )
