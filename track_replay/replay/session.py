"""
Replay session: one clock, one driver, one source and the layers they feed.
"""

import logging
from typing import Any, Dict, Optional

from track_replay.layers.registry import LayerRegistry
from track_replay.shared.metrics import MetricsRegistry

from .clock import FrameScheduler, ReplayClock
from .driver import ReplayDriver
from .source import ReplayDataSource, TrackReplaySource

logger = logging.getLogger(__name__)


class ReplaySession:
    """
    Owns the objects that make up a replay for the lifetime of a session.

    The registry is supplied by the caller so layers can be registered
    before or after the session is built.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        source: ReplayDataSource,
        registry: Optional[LayerRegistry] = None,
        metrics: Optional[MetricsRegistry] = None,
        speed: float = 1.0,
    ):
        self.scheduler = scheduler
        self.source = source
        self.registry = registry if registry is not None else LayerRegistry()
        self.metrics = metrics if metrics is not None else MetricsRegistry()

        self.clock = ReplayClock(scheduler)
        self.clock.set_speed(speed)
        self.driver = ReplayDriver(self.registry, self.clock, self.source, metrics=self.metrics)

    @property
    def end_time_ms(self) -> Optional[float]:
        if isinstance(self.source, TrackReplaySource):
            return self.source.end_time_ms
        return None

    def start(self):
        """Attach the driver; the clock stays paused."""
        self.driver.start()

    def stop(self):
        self.clock.pause()
        self.driver.stop()

    def reset(self):
        """Pause and rewind to the beginning."""
        self.clock.pause()
        self.clock.seek(0)

    def to_dict(self) -> Dict[str, Any]:
        """Playback state for API responses."""
        end = self.end_time_ms
        current = self.clock.get_time()

        return {
            "time_ms": current,
            "speed": self.clock.get_speed(),
            "playing": self.clock.is_playing(),
            "end_time_ms": end,
            "progress": min(1.0, current / end) if end else 0.0,
            "driver_running": self.driver.running,
            "layers": [layer.to_dict() for layer in self.registry.list_layers()],
        }
