"""
Replay data sources.

A data source answers two questions for the driver:
- poll(from_ms, to_ms): what happened between from_ms and to_ms
- snapshot(t_ms): what is the state at t_ms (optional)

Sources keep a cursor per track so forward polling never sends a sample
twice. Backward movement must go through snapshot, which resets the cursors.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from track_replay.shared.protocol import GeoFeature, GeoPoint, ReplayEvent, Upsert

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """One timestamped observation on a track."""
    t_ms: float
    lat: float
    lng: float
    heading_deg: float = 0.0


@dataclass
class Track:
    """Samples for one entity, ascending by t_ms."""
    track_id: str
    samples: list[Sample] = field(default_factory=list)

    @property
    def start_ms(self) -> Optional[float]:
        return self.samples[0].t_ms if self.samples else None

    @property
    def end_ms(self) -> Optional[float]:
        return self.samples[-1].t_ms if self.samples else None


@dataclass
class TrackCursor:
    """Index of the next unconsumed sample of a track."""
    track_id: str
    samples: list[Sample]
    index: int = 0


class ReplayDataSource(ABC):
    """
    Windowed event source consumed by ReplayDriver.

    poll() is only guaranteed correct for forward sessions, i.e. calls
    whose from_ms values are non-decreasing.
    """

    @abstractmethod
    def poll(self, from_ms: float, to_ms: float) -> list[ReplayEvent]:
        """
        Events for samples up to to_ms, each delivered at most once.

        Returns an empty list when to_ms < from_ms; callers must use
        snapshot() for backward movement.
        """

    @property
    def supports_snapshot(self) -> bool:
        return False

    def snapshot(self, t_ms: float) -> Optional[list[ReplayEvent]]:
        """Authoritative state at t_ms, or None when unsupported."""
        return None


class TrackReplaySource(ReplayDataSource):
    """
    Replays a set of pre-recorded tracks into one layer.

    Each track becomes a single entity whose id is the track id; every
    sample is delivered as an upsert of that entity.
    """

    def __init__(self, layer_id: str, tracks: list[Track]):
        self.layer_id = layer_id
        self._cursors = [
            TrackCursor(track_id=t.track_id, samples=list(t.samples))
            for t in tracks
        ]

    @property
    def supports_snapshot(self) -> bool:
        return True

    @property
    def track_ids(self) -> list[str]:
        return [c.track_id for c in self._cursors]

    @property
    def end_time_ms(self) -> float:
        """Timestamp of the last sample across all tracks."""
        ends = [c.samples[-1].t_ms for c in self._cursors if c.samples]
        return max(ends) if ends else 0.0

    def cursor_index(self, track_id: str) -> Optional[int]:
        for cursor in self._cursors:
            if cursor.track_id == track_id:
                return cursor.index
        return None

    def poll(self, from_ms: float, to_ms: float) -> list[ReplayEvent]:
        # Backward windows are the driver's job (snapshot); never repair here
        if to_ms < from_ms:
            return []

        events = []

        for cursor in self._cursors:
            samples = cursor.samples

            # Jumping forward: drop samples the window has already passed
            while cursor.index < len(samples) and samples[cursor.index].t_ms < from_ms:
                cursor.index += 1

            while cursor.index < len(samples) and samples[cursor.index].t_ms <= to_ms:
                events.append(self._to_event(cursor.track_id, samples[cursor.index]))
                cursor.index += 1

        return events

    def snapshot(self, t_ms: float) -> list[ReplayEvent]:
        events = []

        for cursor in self._cursors:
            samples = cursor.samples
            if not samples:
                continue

            last = 0
            while last + 1 < len(samples) and samples[last + 1].t_ms <= t_ms:
                last += 1

            events.append(self._to_event(cursor.track_id, samples[last]))

            if samples[last].t_ms <= t_ms:
                cursor.index = last + 1
            else:
                # Nothing reached yet: the first sample stands in until playback gets there
                cursor.index = 0

        logger.debug(f"Snapshot at {t_ms:.1f}ms: {len(events)} tracks")
        return events

    def _to_event(self, track_id: str, sample: Sample) -> ReplayEvent:
        feature = GeoFeature(
            id=track_id,
            geometry=GeoPoint(sample.lat, sample.lng),
            properties={"heading_deg": sample.heading_deg, "name": track_id},
        )
        return ReplayEvent(layer_id=self.layer_id, delta=Upsert(feature))
