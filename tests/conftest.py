"""Shared pytest fixtures for the Snyk issues client tests.

Fixture Organization:
    - Client fixtures: SnykClient wired to a FakeSnykAPI via httpx.MockTransport
    - Logger fixtures: injected logger that caplog can observe
    - Config isolation: environment and .env scrubbed per test

References:
    - pytest fixtures docs: https://docs.pytest.org/en/stable/how-to/fixtures.html
    - httpx MockTransport: https://www.python-httpx.org/advanced/transports/#mock-transports
"""

import logging
import sys
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

# Add tests directory to sys.path so test modules can import fake_snyk_api
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

from fake_snyk_api import BASE_URL, TOKEN, FakeSnykAPI  # noqa: E402

from src.snyk_issues.client import SnykClient  # noqa: E402
from src.snyk_issues.config import reset_config  # noqa: E402


@pytest.fixture
def client_logger() -> logging.Logger:
    """Dedicated logger injected into clients so caplog can assert on it."""
    logger = logging.getLogger("tests.snyk_client")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def make_client(client_logger) -> Callable[..., SnykClient]:
    """Factory building a SnykClient wired to a FakeSnykAPI."""

    def _make(api: FakeSnykAPI, base_url: str = BASE_URL) -> SnykClient:
        return SnykClient(
            TOKEN,
            base_url,
            logger=client_logger,
            transport=httpx.MockTransport(api),
        )

    return _make


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate SnykConfig from the developer's environment and .env file."""
    for key in (
        "SNYK_API_TOKEN",
        "SNYK_BASE_URL",
        "SNYK_READ_TIMEOUT",
        "SNYK_LOG_LEVEL",
        "SNYK_LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield monkeypatch
    reset_config()
