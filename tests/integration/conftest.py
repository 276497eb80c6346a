"""
Shared fixtures for integration tests.
"""

import pytest
from fastapi.testclient import TestClient

from track_replay.api.server import create_app
from track_replay.main import build_session
from track_replay.replay.clock import AsyncioFrameScheduler


@pytest.fixture
def api_session(small_fleet_config):
    scheduler = AsyncioFrameScheduler(frame_interval_ms=small_fleet_config.clock.frame_interval_ms)
    return build_session(small_fleet_config, scheduler)


@pytest.fixture
def client(api_session):
    app = create_app(api_session)
    with TestClient(app) as client:
        yield client
