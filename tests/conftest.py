"""Shared fixtures for bed server tests."""

from zoneinfo import ZoneInfo

import pytest

from smart_bed.server.services.presence import PresenceStore
from smart_bed.server.web_server import create_app

# 2026-10-19 12:00:00 UTC
START = 1792411200.0
TIMEOUT_MS = 10 * 60 * 1000


class FakeClock:
    """Callable clock returning epoch seconds that only moves when told to."""

    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return PresenceStore(
        stale_timeout_ms=TIMEOUT_MS, clock=clock, tz=ZoneInfo("America/New_York")
    )


@pytest.fixture
def public_dir(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<html>bed ui</html>")
    (public / "app.js").write_text("console.log('bed');")
    return public


@pytest.fixture
def app(store, public_dir):
    app = create_app(store, public_dir=str(public_dir), production=False)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
