"""Utility modules for the position indicator."""

from position_indicator.utils.timing import Timer, TickClock, FrameRateEnforcer, measure_time
from position_indicator.utils.geometry import (
    heading_vector,
    heading_towards,
    distance,
    melee_gap,
    is_behind,
    orbit_position,
)

__all__ = [
    "Timer",
    "TickClock",
    "FrameRateEnforcer",
    "measure_time",
    "heading_vector",
    "heading_towards",
    "distance",
    "melee_gap",
    "is_behind",
    "orbit_position",
]
