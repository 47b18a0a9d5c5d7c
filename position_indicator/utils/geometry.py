"""
Geometry utilities for range and facing checks.

Provides 2-D vector helpers used by the simulated world and probe.
"""

from typing import Sequence, Union
import numpy as np

# Type aliases
Vector = Union[np.ndarray, Sequence[float]]


def as_vector(point: Vector) -> np.ndarray:
    """Convert a point to a float64 numpy vector of shape (2,)."""
    vec = np.asarray(point, dtype=np.float64)
    if vec.shape != (2,):
        raise ValueError(f"Expected a 2-D point, got shape {vec.shape}")
    return vec


def heading_vector(angle_rad: float) -> np.ndarray:
    """
    Unit vector for a heading angle.

    Args:
        angle_rad: Heading in radians, 0 along +x, counter-clockwise

    Returns:
        Unit vector of shape (2,)
    """
    return np.array([np.cos(angle_rad), np.sin(angle_rad)], dtype=np.float64)


def heading_towards(origin: Vector, point: Vector) -> float:
    """Heading angle from origin to point in radians."""
    delta = as_vector(point) - as_vector(origin)
    return float(np.arctan2(delta[1], delta[0]))


def distance(a: Vector, b: Vector) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(as_vector(b) - as_vector(a)))


def melee_gap(player: Vector, target: Vector, reach: float) -> float:
    """
    Distance the player must still close to reach melee range.

    Args:
        player: Player position
        target: Target position
        reach: Combined melee reach of player and target

    Returns:
        0.0 when within reach, otherwise the remaining gap
    """
    return max(0.0, distance(player, target) - reach)


def is_behind(player: Vector, target: Vector, target_facing_rad: float) -> bool:
    """
    Check whether the player stands in the target's rear half-plane.

    Args:
        player: Player position
        target: Target position
        target_facing_rad: Direction the target faces

    Returns:
        True if the player is behind the target
    """
    to_player = as_vector(player) - as_vector(target)
    if not np.any(to_player):
        # Same spot: no defined side, never claim "behind"
        return False
    return float(np.dot(to_player, heading_vector(target_facing_rad))) < 0.0


def orbit_position(center: Vector, radius: float, angle_rad: float) -> np.ndarray:
    """Point on a circle around center."""
    return as_vector(center) + radius * heading_vector(angle_rad)
