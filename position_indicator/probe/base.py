"""
Abstract range/facing probe interface.

Defines the contract that every probe must implement.
"""

from abc import ABC, abstractmethod
from typing import Optional


class ProbeError(Exception):
    """Raised by a probe when a query cannot be answered this tick."""


class Probe(ABC):
    """
    Abstract base class for range/facing probes.

    A probe answers two questions about a target reference: how far it is
    from melee range, and whether the player stands behind it. Either query
    may fail; returning None or raising ProbeError both mean "no information
    available this tick".
    """

    @abstractmethod
    def query_melee_distance(self, target: str) -> Optional[float]:
        """
        Get distance to the target in melee units.

        Args:
            target: Target reference

        Returns:
            0.0 when in melee range, positive distance when out of range,
            None on error
        """
        pass

    @abstractmethod
    def query_is_behind(self, target: str) -> Optional[bool]:
        """
        Check whether the player is behind the target.

        Args:
            target: Target reference

        Returns:
            True if behind, False if in front, None on error
        """
        pass

    def is_target_dead(self, target: str) -> bool:
        """
        Check whether the target died since tracking began.

        Probes without a death query never report a death.
        """
        return False
