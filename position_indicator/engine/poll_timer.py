"""Poll throttling for range/facing queries."""

from dataclasses import dataclass, field


DEFAULT_POLL_INTERVAL_S = 0.2


@dataclass
class PollTimer:
    """
    Accumulates tick deltas and decides when the probe should be queried.

    The timer decouples the poll rate from the host frame rate:
    1. Each tick adds its delta to the accumulator
    2. Once the accumulator reaches the interval, one poll fires and the
       accumulator drops back to 0 (no catch-up bursts)
    3. preset() fills the accumulator so the next tick polls immediately

    The interval is expected to be clamped by the configuration layer.
    """

    interval_s: float = DEFAULT_POLL_INTERVAL_S
    accumulated_s: float = field(default=0.0)

    def __post_init__(self):
        self.set_interval(self.interval_s)

    def set_interval(self, interval_s: float) -> None:
        """Change the poll interval. Takes effect on the next tick."""
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        self.interval_s = interval_s

    def preset(self) -> None:
        """Arm the timer so the very next tick fires a poll."""
        self.accumulated_s = self.interval_s

    def reset(self) -> None:
        """Clear accumulated time."""
        self.accumulated_s = 0.0

    def tick(self, delta_s: float) -> bool:
        """
        Advance the timer.

        Args:
            delta_s: Elapsed seconds since the previous tick

        Returns:
            True if a poll is due this tick
        """
        self.accumulated_s += max(0.0, delta_s)
        if self.accumulated_s >= self.interval_s:
            self.accumulated_s = 0.0
            return True
        return False

    @property
    def remaining_s(self) -> float:
        """Seconds left until the next poll."""
        return max(0.0, self.interval_s - self.accumulated_s)
