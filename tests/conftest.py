"""
Shared fixtures: isolated settings and a simulated Tasks API.
"""

import os

import pytest

from conduit.settings import ConduitSettings, resolve
from tests.simulation import API_TOKEN, API_URL, SimulatedTasksApi


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    """Strip CONDUIT_* variables so the real environment doesn't leak in."""
    for key in list(os.environ):
        if key.startswith("CONDUIT_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def settings() -> ConduitSettings:
    """Valid settings with a small page size so pagination is exercised."""
    return resolve(env_file=None, api_url=API_URL, api_token=API_TOKEN, page_size=2)


@pytest.fixture
def api() -> SimulatedTasksApi:
    return SimulatedTasksApi()


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
