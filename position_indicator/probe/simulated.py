"""Probe backed by the simulated world."""

import logging
from typing import Optional, TYPE_CHECKING

import numpy as np

from .base import Probe, ProbeError

if TYPE_CHECKING:
    from position_indicator.sim.world import SimulatedWorld


logger = logging.getLogger(__name__)


class SimulatedProbe(Probe):
    """
    Answers range/facing queries from a SimulatedWorld.

    Features:
    - Melee distance is the gap left after melee reach (0.0 in range)
    - Facing check uses the target's rear half-plane
    - Optional random query failures to exercise stale-data handling
    """

    def __init__(
        self,
        world: "SimulatedWorld",
        error_rate: float = 0.0,
        seed: Optional[int] = None,
    ):
        """
        Initialize simulated probe.

        Args:
            world: World to read
            error_rate: Probability in [0, 1] that a query fails
            seed: Seed for the failure generator
        """
        if not 0.0 <= error_rate <= 1.0:
            raise ValueError(f"error_rate must be between 0.0 and 1.0, got {error_rate}")

        self._world = world
        self._error_rate = error_rate
        self._rng = np.random.default_rng(seed)
        self._failures = 0

    @property
    def failures(self) -> int:
        """Number of injected query failures."""
        return self._failures

    def query_melee_distance(self, target: str) -> Optional[float]:
        self._maybe_fail("distance")
        if not self._world.alive:
            return None
        return self._world.melee_gap

    def query_is_behind(self, target: str) -> Optional[bool]:
        self._maybe_fail("facing")
        if not self._world.alive:
            return None
        return self._world.player_behind_target

    def is_target_dead(self, target: str) -> bool:
        return not self._world.alive

    def _maybe_fail(self, query: str) -> None:
        if self._error_rate > 0.0 and self._rng.random() < self._error_rate:
            self._failures += 1
            raise ProbeError(f"Simulated {query} query failure")


def create_probe(config, world: "SimulatedWorld") -> SimulatedProbe:
    """
    Factory function to create a probe for the simulated world.

    Args:
        config: SimulationConfig section
        world: World to probe

    Returns:
        Configured SimulatedProbe
    """
    return SimulatedProbe(
        world=world,
        error_rate=config.probe_error_rate,
        seed=config.seed,
    )
