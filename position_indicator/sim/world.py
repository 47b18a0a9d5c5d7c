"""
Simulated game world for running the indicator without a game client.

A single hostile target circles the player. Its orbit radius oscillates in
and out of melee reach, and it alternates between facing the player and
facing away, so every indicator state comes up. The target dies after a
fixed lifetime and a new one is acquired after a respawn delay.
"""

import logging
import math
from typing import List, Tuple

import numpy as np

from position_indicator.config import SimulationConfig
from position_indicator.engine.types import TargetEvent, TargetValidity, NO_TARGET
from position_indicator.utils.geometry import (
    orbit_position,
    heading_towards,
    melee_gap,
    is_behind,
)


logger = logging.getLogger(__name__)

WorldEvent = Tuple[TargetEvent, TargetValidity]

LIVE_TARGET = TargetValidity(exists=True, attackable=True, alive=True)
DEAD_TARGET = TargetValidity(exists=True, attackable=True, alive=False)


class SimulatedWorld:
    """
    Player at the origin, one target orbiting it.

    Usage:
        world = SimulatedWorld(SimulationConfig())
        events = world.spawn()

        # In host loop:
        for event, validity in world.step(delta_s):
            engine.handle_event(event, validity)
    """

    def __init__(self, config: SimulationConfig):
        """
        Initialize world.

        Args:
            config: Simulation parameters
        """
        if config.orbit_period_s <= 0 or config.facing_period_s <= 0:
            raise ValueError("orbit_period_s and facing_period_s must be positive")

        self._config = config
        self._time_s = 0.0
        self._player_pos = np.zeros(2, dtype=np.float64)
        self._target_pos = orbit_position(self._player_pos, config.orbit_radius, 0.0)
        self._target_facing = math.pi

        self._exists = False
        self._alive = False
        self._age_s = 0.0
        self._respawn_in_s = 0.0
        self._targets_spawned = 0

    @property
    def time_s(self) -> float:
        return self._time_s

    @property
    def player_position(self) -> np.ndarray:
        return self._player_pos.copy()

    @property
    def target_position(self) -> np.ndarray:
        return self._target_pos.copy()

    @property
    def target_facing(self) -> float:
        """Target heading in radians."""
        return self._target_facing

    @property
    def alive(self) -> bool:
        return self._exists and self._alive

    @property
    def targets_spawned(self) -> int:
        return self._targets_spawned

    @property
    def validity(self) -> TargetValidity:
        """Validity of the player's current target."""
        if not self._exists:
            return NO_TARGET
        return LIVE_TARGET if self._alive else DEAD_TARGET

    @property
    def melee_gap(self) -> float:
        return melee_gap(self._player_pos, self._target_pos, self._config.melee_reach)

    @property
    def player_behind_target(self) -> bool:
        return is_behind(self._player_pos, self._target_pos, self._target_facing)

    def spawn(self) -> List[WorldEvent]:
        """Spawn a new live target and select it."""
        self._exists = True
        self._alive = True
        self._age_s = 0.0
        self._targets_spawned += 1
        self._update_target()
        logger.info(f"Target #{self._targets_spawned} acquired")
        return [(TargetEvent.TARGET_ACQUIRED, self.validity)]

    def step(self, delta_s: float) -> List[WorldEvent]:
        """
        Advance the world.

        Args:
            delta_s: Elapsed seconds

        Returns:
            Target-lifecycle events raised during this step
        """
        events: List[WorldEvent] = []
        delta_s = max(0.0, delta_s)
        self._time_s += delta_s

        if self.alive:
            self._age_s += delta_s
            if self._age_s >= self._config.target_lifetime_s:
                self._alive = False
                self._respawn_in_s = self._config.respawn_delay_s
                logger.info(f"Target #{self._targets_spawned} died")
                events.append((TargetEvent.TARGET_DIED, self.validity))
        elif self._exists:
            self._respawn_in_s -= delta_s
            if self._respawn_in_s <= 0:
                events.extend(self.spawn())

        if self.alive:
            self._update_target()

        return events

    def _update_target(self) -> None:
        """Move the target along its orbit and set its facing."""
        cfg = self._config
        phase = 2.0 * math.pi * self._time_s / cfg.orbit_period_s
        radius = cfg.orbit_radius + cfg.orbit_amplitude * math.sin(phase)
        self._target_pos = orbit_position(self._player_pos, max(0.0, radius), phase)

        # First half of each facing period: face the player; second half: turn away
        facing_player = heading_towards(self._target_pos, self._player_pos)
        half = (self._time_s % cfg.facing_period_s) >= cfg.facing_period_s / 2.0
        self._target_facing = facing_player + (math.pi if half else 0.0)
