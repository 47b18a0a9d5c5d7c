"""
Timing utilities for the host tick loop.

Provides the clock source that feeds per-tick deltas to the engine, tick
rate enforcement and latency measurement.
"""

import time
from typing import Callable, Optional
from contextlib import contextmanager


class Timer:
    """
    High-precision timer for measuring operation latency.

    Uses monotonic clock for reliable measurements.
    """

    def __init__(self):
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    def start(self) -> "Timer":
        """Start the timer."""
        self._start_time = time.monotonic()
        self._end_time = None
        return self

    def stop(self) -> float:
        """
        Stop the timer and return elapsed time in milliseconds.

        Returns:
            Elapsed time in milliseconds
        """
        self._end_time = time.monotonic()
        return self.elapsed_ms

    @property
    def elapsed_ms(self) -> float:
        """Elapsed time in milliseconds, or 0 if timer not started."""
        if self._start_time is None:
            return 0.0

        end = self._end_time if self._end_time is not None else time.monotonic()
        return (end - self._start_time) * 1000.0


@contextmanager
def measure_time():
    """
    Context manager for measuring execution time.

    Yields:
        Timer object that can be queried for elapsed time

    Example:
        with measure_time() as timer:
            engine.on_tick(delta)
        print(f"Tick: {timer.elapsed_ms:.2f}ms")
    """
    timer = Timer()
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()


class TickClock:
    """
    Clock source producing the elapsed-time delta for each tick.

    The first tick reports 0. Deltas are capped so a stall (debugger pause,
    window drag) does not arrive as one huge step.
    """

    def __init__(
        self,
        max_delta_s: float = 0.25,
        time_source: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize clock.

        Args:
            max_delta_s: Largest delta ever reported
            time_source: Monotonic time function
        """
        if max_delta_s <= 0:
            raise ValueError("max_delta_s must be positive")
        self._max_delta_s = max_delta_s
        self._time_source = time_source
        self._last: Optional[float] = None
        self._elapsed_s = 0.0
        self._ticks = 0

    def tick(self) -> float:
        """
        Mark a new tick.

        Returns:
            Seconds since the previous tick, capped at max_delta_s
        """
        now = self._time_source()
        delta = 0.0 if self._last is None else max(0.0, now - self._last)
        self._last = now
        delta = min(delta, self._max_delta_s)
        self._elapsed_s += delta
        self._ticks += 1
        return delta

    @property
    def elapsed_s(self) -> float:
        """Sum of all reported deltas."""
        return self._elapsed_s

    @property
    def ticks(self) -> int:
        return self._ticks

    def reset(self) -> None:
        self._last = None
        self._elapsed_s = 0.0
        self._ticks = 0


class FrameRateEnforcer:
    """
    Enforces a target tick rate by sleeping when a tick finishes early.
    """

    def __init__(self, target_fps: float):
        """
        Initialize frame rate enforcer.

        Args:
            target_fps: Target ticks per second (must be > 0)
        """
        if target_fps <= 0:
            raise ValueError("target_fps must be positive")

        self._target_fps = target_fps
        self._frame_interval_s = 1.0 / target_fps

    @property
    def target_fps(self) -> float:
        return self._target_fps

    @property
    def frame_interval_ms(self) -> float:
        return self._frame_interval_s * 1000.0

    def start_frame(self) -> float:
        """
        Mark the start of a new frame.

        Returns:
            Monotonic timestamp of frame start
        """
        return time.monotonic()

    def end_frame(self, frame_start: float) -> float:
        """
        Mark the end of frame processing and sleep if needed.

        Args:
            frame_start: Timestamp from start_frame()

        Returns:
            Actual sleep time in milliseconds (0 if no sleep needed)
        """
        remaining_time = self._frame_interval_s - (time.monotonic() - frame_start)
        if remaining_time <= 0:
            return 0.0
        time.sleep(remaining_time)
        return remaining_time * 1000.0
