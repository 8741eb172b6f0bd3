"""Registry mapping error categories to problem type URIs."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
import logging
import threading

from apikit.core.config import BLANK_URL
from apikit.core.config import DEFAULT_ERROR_TYPE_PATHS
from apikit.core.config import ProblemSettings
from apikit.core.config import get_problem_settings

logger = logging.getLogger(__name__)

VALIDATION_ERROR = "validation_error"
NOT_FOUND_ERROR = "not_found_error"
SERVER_ERROR = "server_error"
BAD_REQUEST_ERROR = "bad_request_error"


class ProblemTypeRegistry:
    """Build problem ``type`` URIs from a base URL and per-category paths.

    Configuration calls are expected at startup; ``resolve`` runs on every
    error response and may be called from concurrent requests.
    """

    def __init__(
        self,
        *,
        base_url: str = BLANK_URL,
        error_paths: Mapping[str, str] | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._base_url = base_url
        self._error_paths = dict(DEFAULT_ERROR_TYPE_PATHS)
        if error_paths:
            self._error_paths.update(error_paths)

    @classmethod
    def from_settings(cls, settings: ProblemSettings) -> ProblemTypeRegistry:
        """Create a registry from loaded problem settings."""
        return cls(base_url=settings.base_url, error_paths=settings.error_type_paths)

    @property
    def base_url(self) -> str:
        with self._lock:
            return self._base_url

    @property
    def error_paths(self) -> dict[str, str]:
        """Return a copy of the category to path mapping."""
        with self._lock:
            return dict(self._error_paths)

    def set_base_url(self, base_url: str) -> None:
        """Replace the base URL used for every known category."""
        with self._lock:
            self._base_url = base_url

    def set_error_path(self, category: str, path: str) -> None:
        """Set or override the documentation path of one category."""
        with self._lock:
            self._error_paths[category] = path

    def set_error_paths(self, paths: Mapping[str, str]) -> None:
        """Set or override the documentation paths of several categories."""
        with self._lock:
            self._error_paths.update(paths)

    def resolve(self, category: str) -> str:
        """Return the full problem type URI for ``category``.

        Unknown categories resolve to ``about:blank``. While no base URL is
        configured the bare path is returned.
        """
        with self._lock:
            path = self._error_paths.get(category)
            if path is None:
                return BLANK_URL
            base_url = "" if self._base_url == BLANK_URL else self._base_url
            return base_url + path


@lru_cache(maxsize=1)
def get_problem_registry() -> ProblemTypeRegistry:
    """Return the process-wide registry, built once from the environment."""
    settings = get_problem_settings()
    logger.debug("Building problem type registry with settings=%s", settings.safe_for_logging())
    return ProblemTypeRegistry.from_settings(settings)


def set_problem_base_url(base_url: str) -> None:
    """Configure the base URL of the process-wide registry."""
    get_problem_registry().set_base_url(base_url)


def set_problem_error_path(category: str, path: str) -> None:
    """Configure one category path of the process-wide registry."""
    get_problem_registry().set_error_path(category, path)


def set_problem_error_paths(paths: Mapping[str, str]) -> None:
    """Configure several category paths of the process-wide registry."""
    get_problem_registry().set_error_paths(paths)


def get_problem_type_url(category: str) -> str:
    """Resolve ``category`` against the process-wide registry."""
    return get_problem_registry().resolve(category)
