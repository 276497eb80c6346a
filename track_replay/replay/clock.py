"""
Virtual playback clock.

The clock owns virtual time (milliseconds) and advances it from wall-clock
frame deltas scaled by the playback speed. Frames are pumped by a
FrameScheduler supplied by the host, so the same clock can be stepped by
hand in tests or by an asyncio loop in a server.

Every time change produces a tick (prev, new) followed by a time (new)
notification. Seeking is the only way time moves backward.
"""

import asyncio
import logging
import math
import numbers
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TimeListener = Callable[[float], None]
TickListener = Callable[[float, float], None]
StepCallback = Callable[[float], None]


class ListenerTable:
    """
    Token-keyed callback table.

    Callbacks are invoked in registration order. The unsubscribe function
    returned by add() only ever removes its own entry and may be called
    any number of times.
    """

    def __init__(self):
        self._listeners: dict[int, Callable] = {}
        self._next_token = 0

    def add(self, callback: Callable) -> Callable[[], None]:
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = callback

        def unsubscribe():
            self._listeners.pop(token, None)

        return unsubscribe

    def emit(self, *args):
        # Entries removed by an earlier callback are skipped for this emit
        for token in list(self._listeners):
            callback = self._listeners.get(token)
            if callback is not None:
                callback(*args)

    def __len__(self) -> int:
        return len(self._listeners)


class StepHandle(ABC):
    @abstractmethod
    def cancel(self):
        ...


class FrameScheduler(ABC):
    """Host-supplied frame pump."""

    @abstractmethod
    def now(self) -> float:
        """Current wall time in milliseconds."""

    @abstractmethod
    def request_step(self, callback: StepCallback) -> StepHandle:
        """Run callback(now_ms) once, on the next frame."""


class _ManualHandle(StepHandle):
    def __init__(self, scheduler: "ManualFrameScheduler", callback: StepCallback):
        self._scheduler = scheduler
        self.callback = callback

    def cancel(self):
        self._scheduler._discard(self)


class ManualFrameScheduler(FrameScheduler):
    """
    Deterministic scheduler driven by explicit advance() calls.

    Used by tests and by headless replays where frames are simulated
    rather than timed.
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = start_ms
        self._pending: list[_ManualHandle] = []

    def now(self) -> float:
        return self._now

    def request_step(self, callback: StepCallback) -> StepHandle:
        handle = _ManualHandle(self, callback)
        self._pending.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return len(self._pending)

    def advance(self, dt_ms: float) -> int:
        """
        Move wall time forward by dt_ms and run the steps that were
        pending before the call. Steps requested while running wait for
        the next advance().

        Returns:
            Number of steps run
        """
        self._now += dt_ms
        due, self._pending = self._pending, []
        for handle in due:
            handle.callback(self._now)
        return len(due)

    def _discard(self, handle: _ManualHandle):
        if handle in self._pending:
            self._pending.remove(handle)


class _AsyncioHandle(StepHandle):
    def __init__(self, timer: asyncio.TimerHandle):
        self._timer = timer

    def cancel(self):
        self._timer.cancel()


class AsyncioFrameScheduler(FrameScheduler):
    """Pumps frames on an asyncio event loop at a fixed interval."""

    def __init__(
        self,
        frame_interval_ms: float = 16.0,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.frame_interval_ms = frame_interval_ms
        self._loop = loop

    def now(self) -> float:
        return time.monotonic() * 1000.0

    def request_step(self, callback: StepCallback) -> StepHandle:
        loop = self._loop or asyncio.get_running_loop()
        timer = loop.call_later(
            self.frame_interval_ms / 1000.0,
            lambda: callback(self.now()),
        )
        return _AsyncioHandle(timer)


class ReplayClock:
    """
    Virtual-time clock with play/pause/seek/speed.

    States: paused (initial) and playing. While playing, each frame step
    advances time by wall_delta * speed.
    """

    def __init__(self, scheduler: FrameScheduler):
        self._scheduler = scheduler
        self._playing = False
        self._speed = 1.0
        self._t_ms = 0.0
        self._last_wall = 0.0
        self._pending: Optional[StepHandle] = None

        self._time_listeners = ListenerTable()
        self._tick_listeners = ListenerTable()

    def is_playing(self) -> bool:
        return self._playing

    def get_time(self) -> float:
        return self._t_ms

    def get_speed(self) -> float:
        return self._speed

    def set_speed(self, x: float):
        """Set playback speed; non-finite or non-positive values are ignored."""
        if isinstance(x, bool) or not isinstance(x, numbers.Real):
            logger.debug(f"Ignoring non-numeric speed {x!r}")
            return
        if not math.isfinite(float(x)) or x <= 0:
            logger.debug(f"Ignoring invalid speed {x!r}")
            return
        self._speed = float(x)

    def on_time(self, callback: TimeListener) -> Callable[[], None]:
        return self._time_listeners.add(callback)

    def on_tick(self, callback: TickListener) -> Callable[[], None]:
        return self._tick_listeners.add(callback)

    def play(self):
        if self._playing:
            return

        self._playing = True
        self._last_wall = self._scheduler.now()
        self._schedule()
        logger.info(f"Playback started at {self._t_ms:.1f}ms ({self._speed}x)")

        self._time_listeners.emit(self._t_ms)

    def pause(self):
        self._playing = False
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        logger.info(f"Playback paused at {self._t_ms:.1f}ms")

        self._time_listeners.emit(self._t_ms)

    def seek(self, t_ms: float):
        """Jump to t_ms (clamped to 0); works in either state."""
        prev = self._t_ms
        self._t_ms = max(0.0, float(t_ms))
        logger.debug(f"Seek {prev:.1f}ms -> {self._t_ms:.1f}ms")

        self._notify(prev)

    def step(self, now_ms: float):
        """Advance one frame given the current wall time."""
        self._pending = None
        if not self._playing:
            return

        dt = now_ms - self._last_wall
        self._last_wall = now_ms

        prev = self._t_ms
        self._t_ms = prev + dt * self._speed

        self._notify(prev)

        # A listener may have paused us
        if self._playing and self._pending is None:
            self._schedule()

    def _schedule(self):
        self._pending = self._scheduler.request_step(self.step)

    def _notify(self, prev: float):
        self._tick_listeners.emit(prev, self._t_ms)
        self._time_listeners.emit(self._t_ms)
