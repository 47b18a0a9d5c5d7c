"""Scripted probe that replays canned readings."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional

from .base import Probe


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeReading:
    """
    One canned probe answer.

    distance: Melee distance, or None to simulate a failed query
    behind: Facing answer, or None to simulate a failed facing query
    dead: Whether the target is reported dead
    """
    distance: Optional[float]
    behind: Optional[bool] = False
    dead: bool = False


class ScriptedProbe(Probe):
    """
    Probe that replays queued readings in order.

    Each distance query consumes one reading. The facing and death queries
    answer from the reading consumed by the latest distance query. Once the
    queue runs dry the last reading keeps repeating.

    Usage:
        probe = ScriptedProbe([ProbeReading(5.0), ProbeReading(0.0, behind=True)])
        probe.query_melee_distance("target")  # 5.0
        probe.query_melee_distance("target")  # 0.0
        probe.query_is_behind("target")       # True
    """

    def __init__(self, readings: Optional[Iterable[ProbeReading]] = None):
        self._queue: Deque[ProbeReading] = deque(readings or [])
        self._current: ProbeReading = ProbeReading(distance=None, behind=None)
        self._distance_queries = 0
        self._facing_queries = 0
        self._queried_targets: List[str] = []

    def push(self, *readings: ProbeReading) -> None:
        """Queue more readings."""
        self._queue.extend(readings)

    def set_reading(self, reading: ProbeReading) -> None:
        """Drop queued readings and answer with reading from now on."""
        self._queue.clear()
        self._current = reading

    def query_melee_distance(self, target: str) -> Optional[float]:
        self._distance_queries += 1
        self._queried_targets.append(target)
        if self._queue:
            self._current = self._queue.popleft()
        return self._current.distance

    def query_is_behind(self, target: str) -> Optional[bool]:
        self._facing_queries += 1
        return self._current.behind

    def is_target_dead(self, target: str) -> bool:
        # Peek so a death queued next is seen before the distance query
        if self._queue and self._queue[0].dead:
            self._current = self._queue.popleft()
        return self._current.dead

    @property
    def distance_queries(self) -> int:
        """Number of distance queries answered."""
        return self._distance_queries

    @property
    def facing_queries(self) -> int:
        """Number of facing queries answered."""
        return self._facing_queries

    @property
    def queried_targets(self) -> List[str]:
        """Target references seen by distance queries, in order."""
        return list(self._queried_targets)

    @property
    def pending(self) -> int:
        """Number of readings not yet consumed."""
        return len(self._queue)
