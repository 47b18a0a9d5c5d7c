"""Simulated game world for demos and replay."""

from .world import SimulatedWorld, LIVE_TARGET, DEAD_TARGET

__all__ = [
    "SimulatedWorld",
    "LIVE_TARGET",
    "DEAD_TARGET",
]
