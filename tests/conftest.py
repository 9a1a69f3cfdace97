"""Shared fixtures for the average calculator tests."""

import pytest
from avgcalc.config import Config
from avgcalc.constants import DEFAULT_ENDPOINTS
from avgcalc.fetcher import UpstreamError
from avgcalc.service import AverageService
from avgcalc.window import SlidingWindow


class FakeFetcher:
    """Fetcher double that replays queued results per call."""

    def __init__(self, *results):
        self.timeout_ms = 500
        self.results = list(results)
        self.calls = []
        self.closed = False

    def fetch(self, category, timeout_ms=None):
        self.calls.append(category.id)
        result = self.results.pop(0) if self.results else []
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment overrides out of the tests."""
    for name in ("PORT", "AC_PORT", "AC_HOST", "AC_ENV", "AC_WINDOW_SIZE", "AC_FETCH_TIMEOUT_MS",
                 "AC_WARN_MS", "AC_URL_P", "AC_URL_F", "AC_URL_E", "AC_URL_R",
                 "AC_LOG_DIR", "AC_LOG_LEVEL", "AC_CONSOLE_LEVEL", "AC_ACCESS_LOG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_service():
    def _make(*results, capacity=10):
        return AverageService(FakeFetcher(*results), SlidingWindow(capacity), DEFAULT_ENDPOINTS)
    return _make


@pytest.fixture
def upstream_error():
    return UpstreamError("Status: 503", status=503)


@pytest.fixture
def dev_config():
    return Config.from_dict({"server": {"environment": "development"}})


@pytest.fixture
def prod_config():
    return Config.from_dict({"server": {"environment": "production"}})
