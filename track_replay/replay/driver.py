"""
Replay driver: turns clock ticks into data source calls.

Forward ticks poll the source for the (from, to] window. Backward ticks
(a seek into the past) clear every replay-capable layer and repopulate
them from a snapshot when the source offers one.
"""

import logging
from typing import Callable, Iterable, Optional

from track_replay.layers.registry import LayerRegistry
from track_replay.shared.metrics import MetricsRegistry
from track_replay.shared.protocol import ReplayEvent

from .clock import ReplayClock
from .source import ReplayDataSource

logger = logging.getLogger(__name__)


class ReplayDriver:
    """
    Connects a ReplayClock to a ReplayDataSource and a LayerRegistry.

    A backward tick clears all replay-capable layers, not only the ones
    the source feeds.
    """

    def __init__(
        self,
        host: LayerRegistry,
        clock: ReplayClock,
        source: ReplayDataSource,
        metrics: Optional[MetricsRegistry] = None,
    ):
        self.host = host
        self.clock = clock
        self.source = source
        self.metrics = metrics
        self._unsubs: list[Callable[[], None]] = []

    @property
    def running(self) -> bool:
        return bool(self._unsubs)

    def start(self):
        if self._unsubs:
            return
        self._unsubs.append(self.clock.on_tick(self._on_tick))
        logger.info("Replay driver started")

    def stop(self):
        if not self._unsubs:
            return
        for unsub in self._unsubs:
            unsub()
        self._unsubs = []
        logger.info("Replay driver stopped")

    def _on_tick(self, from_ms: float, to_ms: float):
        if self.metrics is not None:
            self.metrics.gauge("replay_time_ms", to_ms, help_text="Virtual time of the last tick")

        if to_ms < from_ms:
            self._rewind(to_ms)
            return

        events = self.source.poll(from_ms, to_ms)
        self._count("polls_total", help_text="Forward polls issued")
        self._apply(events)

    def _rewind(self, to_ms: float):
        self.host.clear_all_replay_capable_layers()

        if not self.source.supports_snapshot:
            logger.debug(f"Source has no snapshot; layers left cleared at {to_ms:.1f}ms")
            return

        events = self.source.snapshot(to_ms)
        self._count("snapshots_total", help_text="Snapshots issued on backward seeks")
        if events:
            self._apply(events)

    def _apply(self, events: Iterable[ReplayEvent]):
        applied = 0
        for event in events:
            self.host.apply_to_layer(event.layer_id, event.delta)
            applied += 1

        if applied:
            self._count("events_applied_total", applied, help_text="Deltas forwarded to layers")

    def _count(self, name: str, value: float = 1.0, help_text: str = ""):
        if self.metrics is not None:
            self.metrics.counter(f"replay_{name}", value, help_text=help_text)
