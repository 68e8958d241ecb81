"""
Global pytest fixtures for the URL shortener test suite.

Responsibilities:
    - Provide a controllable clock so expiry can be tested without sleeping
    - Provide isolated in-memory Storage and a UrlManager wired to it
    - Provide a fresh FastAPI TestClient via the app factory

Using `create_app()` per test gives each test fresh in-memory state.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from urlshortener.api import create_app
from urlshortener.config import ENV_VARS, Settings
from urlshortener.manager.url_manager import UrlManager
from urlshortener.storage.storage import Storage

T0 = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Default settings, independent of the developer's environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return Settings()


@pytest.fixture
def storage() -> Storage:
    return Storage()


@pytest.fixture
def manager(storage: Storage, clock: FakeClock) -> UrlManager:
    """UrlManager with L0=8, Lmax=12 over the in-memory storage fixture."""
    return UrlManager(storage=storage, code_length=8, max_reshorten_length=12, clock=clock)


@pytest.fixture
def client(settings: Settings, storage: Storage, clock: FakeClock) -> TestClient:
    """
    Fresh TestClient; redirects are not followed so 303 responses can be inspected.
    """
    app = create_app(settings=settings, storage=storage, clock=clock)
    return TestClient(app, follow_redirects=False)
