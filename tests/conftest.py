"""
Pytest Configuration and Fixtures

Shared fixtures for patient assessment tests.
"""

from typing import Any, Callable

import httpx
import pytest

from apps.assessor.api_client import PatientApiClient
from utils.config import Settings

TEST_BASE_URL = "https://api.test/api"
TEST_API_KEY = "test-key"


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def page_response(records: list[Any], has_next: bool, page: int = 1) -> httpx.Response:
    """Build a GET /patients response envelope."""
    return httpx.Response(
        200,
        json={
            "data": records,
            "pagination": {"page": page, "limit": 20, "hasNext": has_next},
        },
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        API_BASE_URL=TEST_BASE_URL,
        API_KEY=TEST_API_KEY,
        FETCH_MAX_ATTEMPTS=5,
        RETRY_INITIAL_DELAY=1.0,
        PAGE_SIZE=20,
        PAGE_DELAY=0.25,
        MAX_PAGES=50,
        RUN_ONCE=True,
    )


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_client(
    test_settings: Settings, sleep_recorder: SleepRecorder
) -> Callable[..., PatientApiClient]:
    """Factory building a PatientApiClient served by an httpx.MockTransport handler."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], settings: Settings | None = None) -> PatientApiClient:
        settings = settings or test_settings
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url=settings.API_BASE_URL,
        )
        return PatientApiClient(settings, http_client=http_client, sleep=sleep_recorder)

    return _make
