"""
Engine and host-loop metrics.

Counters collected by the proximity engine plus timing helpers for the
host loop.
"""

import time
from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class EngineMetrics:
    """
    Counters collected by the proximity engine.

    All counters are cumulative for the process lifetime.
    """
    ticks: int = 0
    polls: int = 0
    probe_errors: int = 0
    transitions: int = 0
    interrupted_fades: int = 0
    completed_fades: int = 0
    starts: int = 0
    stops: int = 0

    @property
    def probe_error_rate(self) -> float:
        """Fraction of polls that got no data."""
        if self.polls == 0:
            return 0.0
        return self.probe_errors / self.polls

    def reset(self) -> None:
        """Zero every counter."""
        self.ticks = 0
        self.polls = 0
        self.probe_errors = 0
        self.transitions = 0
        self.interrupted_fades = 0
        self.completed_fades = 0
        self.starts = 0
        self.stops = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ticks": self.ticks,
            "polls": self.polls,
            "probe_errors": self.probe_errors,
            "probe_error_rate": round(self.probe_error_rate, 3),
            "transitions": self.transitions,
            "interrupted_fades": self.interrupted_fades,
            "completed_fades": self.completed_fades,
            "starts": self.starts,
            "stops": self.stops,
        }


class FPSCounter:
    """
    Calculates frames per second with rolling window.
    """

    def __init__(self, window_size: int = 30):
        """
        Initialize FPS counter.

        Args:
            window_size: Number of frames to average over
        """
        self._window_size = window_size
        self._timestamps: list = []

    def tick(self) -> float:
        """
        Record a frame and return current FPS.

        Returns:
            Current FPS based on rolling window
        """
        self._timestamps.append(time.monotonic())

        if len(self._timestamps) > self._window_size:
            self._timestamps = self._timestamps[-self._window_size:]

        return self.fps

    @property
    def fps(self) -> float:
        """Calculate current FPS."""
        if len(self._timestamps) < 2:
            return 0.0

        elapsed = self._timestamps[-1] - self._timestamps[0]
        if elapsed <= 0:
            return 0.0

        return (len(self._timestamps) - 1) / elapsed

    def reset(self) -> None:
        self._timestamps.clear()


class LatencyTracker:
    """
    Tracks latency statistics for a single operation.
    """

    def __init__(self, window_size: int = 100):
        self._window_size = window_size
        self._samples: list = []

    def record(self, latency_ms: float) -> None:
        """Record a latency sample."""
        self._samples.append(latency_ms)
        if len(self._samples) > self._window_size:
            self._samples = self._samples[-self._window_size:]

    @property
    def count(self) -> int:
        return len(self._samples)

    @property
    def mean(self) -> float:
        if not self._samples:
            return 0.0
        return sum(self._samples) / len(self._samples)

    @property
    def max(self) -> float:
        if not self._samples:
            return 0.0
        return max(self._samples)

    @property
    def p95(self) -> float:
        """Get 95th percentile latency."""
        if not self._samples:
            return 0.0
        sorted_samples = sorted(self._samples)
        index = int(len(sorted_samples) * 0.95)
        return sorted_samples[min(index, len(sorted_samples) - 1)]

    def reset(self) -> None:
        self._samples.clear()

    def to_dict(self) -> Dict[str, float]:
        """Get statistics as dictionary."""
        return {
            "mean_ms": round(self.mean, 3),
            "max_ms": round(self.max, 3),
            "p95_ms": round(self.p95, 3),
        }
