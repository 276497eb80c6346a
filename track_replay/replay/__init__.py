# Virtual-time replay
from .clock import (
    ReplayClock,
    FrameScheduler,
    ManualFrameScheduler,
    AsyncioFrameScheduler,
    ListenerTable,
)
from .source import (
    ReplayDataSource,
    TrackReplaySource,
    Sample,
    Track,
)
from .driver import ReplayDriver
from .session import ReplaySession

__all__ = [
    "ReplayClock",
    "FrameScheduler",
    "ManualFrameScheduler",
    "AsyncioFrameScheduler",
    "ListenerTable",
    "ReplayDataSource",
    "TrackReplaySource",
    "Sample",
    "Track",
    "ReplayDriver",
    "ReplaySession",
]
