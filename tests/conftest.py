"""
Shared test fixtures for Track Replay tests.
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from track_replay.config import ReplayConfig
from track_replay.layers.registry import LayerRegistry
from track_replay.replay.clock import ManualFrameScheduler, ReplayClock
from track_replay.replay.source import Sample, Track, TrackReplaySource


@pytest.fixture
def scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def clock(scheduler):
    return ReplayClock(scheduler)


@pytest.fixture
def single_track():
    """One vessel with samples at t = 0, 100, 200."""
    return Track(
        track_id="v0",
        samples=[
            Sample(t_ms=0, lat=25.0, lng=121.0, heading_deg=90),
            Sample(t_ms=100, lat=25.001, lng=121.0, heading_deg=90),
            Sample(t_ms=200, lat=25.002, lng=121.0, heading_deg=90),
        ],
    )


@pytest.fixture
def two_tracks(single_track):
    second = Track(
        track_id="v1",
        samples=[
            Sample(t_ms=50, lat=24.0, lng=120.0, heading_deg=0),
            Sample(t_ms=150, lat=24.0, lng=120.001, heading_deg=0),
        ],
    )
    return [single_track, second]


@pytest.fixture
def single_source(single_track):
    return TrackReplaySource("vessels", [single_track])


@pytest.fixture
def registry():
    return LayerRegistry()


@pytest.fixture
def small_fleet_config():
    """A short, low-rate fleet so tests stay fast."""
    return ReplayConfig.from_dict({
        "clock": {"speed": 1.0, "frame_interval_ms": 100},
        "fleet": {"minutes": 0.1, "hz": 10},
    })
