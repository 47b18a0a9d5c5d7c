"""Proximity classification from range/facing probe results."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from position_indicator.probe.base import Probe, ProbeError

from .types import VisualState, TrackingContext, MELEE_EPSILON


logger = logging.getLogger(__name__)


class PollStatus(Enum):
    """Outcome of a single poll."""
    NO_DATA = "no_data"          # Probe gave no information, nothing changed
    UNCHANGED = "unchanged"      # Fresh data matched the stored flags
    CHANGED = "changed"          # Flags changed, state recomputed
    TARGET_DEAD = "target_dead"  # Target died since the last poll


@dataclass(frozen=True)
class PollResult:
    """Result of ProximityClassifier.poll()."""
    status: PollStatus
    state: Optional[VisualState] = None
    distance: Optional[float] = None


def classify_state(
    enabled: bool,
    has_valid_target: bool,
    in_melee: bool,
    is_behind: bool,
) -> VisualState:
    """
    Map tracking flags to the state the indicator should display.

    Total over all 16 flag combinations:
        disabled or no valid target     -> HIDDEN
        valid, not in melee             -> OUT_OF_RANGE
        valid, in melee, behind         -> IN_RANGE_BEHIND
        valid, in melee, not behind     -> IN_RANGE_FRONT
    """
    if not enabled or not has_valid_target:
        return VisualState.HIDDEN
    if not in_melee:
        return VisualState.OUT_OF_RANGE
    if is_behind:
        return VisualState.IN_RANGE_BEHIND
    return VisualState.IN_RANGE_FRONT


def classify_context(context: TrackingContext, enabled: bool) -> VisualState:
    """Classify a tracking context."""
    return classify_state(
        enabled=enabled,
        has_valid_target=context.has_valid_target,
        in_melee=context.in_melee,
        is_behind=context.is_behind,
    )


class ProximityClassifier:
    """
    Turns raw probe readings into tracking flags and a VisualState.

    Stale data is tolerated: a failed distance query leaves the flags as they
    were, so a transient probe failure never flickers the indicator. A failed
    facing query is read as "not behind".
    """

    def __init__(self, probe: Probe, target: str = "target"):
        """
        Initialize classifier.

        Args:
            probe: Range/facing probe to query
            target: Target reference handed to the probe
        """
        self._probe = probe
        self._target = target

    @property
    def probe(self) -> Probe:
        return self._probe

    @property
    def target(self) -> str:
        return self._target

    def poll(self, context: TrackingContext, enabled: bool = True) -> PollResult:
        """
        Query the probe once and update the tracking flags.

        Args:
            context: Tracking context to update in place
            enabled: Whether the indicator is enabled

        Returns:
            PollResult describing what happened
        """
        if not context.has_valid_target:
            return PollResult(status=PollStatus.NO_DATA)

        if self._target_dead():
            logger.debug(f"Target '{self._target}' is dead")
            return PollResult(status=PollStatus.TARGET_DEAD)

        distance = self._query_distance()
        if distance is None:
            return PollResult(status=PollStatus.NO_DATA)

        new_in_melee = distance < MELEE_EPSILON

        # Facing only matters in melee
        new_is_behind = False
        if new_in_melee:
            new_is_behind = self._query_behind() is True

        if new_in_melee == context.in_melee and new_is_behind == context.is_behind:
            return PollResult(status=PollStatus.UNCHANGED, distance=distance)

        logger.debug(
            f"State change: melee {context.in_melee}->{new_in_melee} "
            f"behind {context.is_behind}->{new_is_behind}"
        )
        context.in_melee = new_in_melee
        context.is_behind = new_is_behind

        return PollResult(
            status=PollStatus.CHANGED,
            state=classify_context(context, enabled),
            distance=distance,
        )

    def _target_dead(self) -> bool:
        try:
            return bool(self._probe.is_target_dead(self._target))
        except ProbeError as e:
            logger.debug(f"Death check failed: {e}")
            return False

    def _query_distance(self) -> Optional[float]:
        try:
            return self._probe.query_melee_distance(self._target)
        except ProbeError as e:
            logger.debug(f"Distance query failed: {e}")
            return None

    def _query_behind(self) -> Optional[bool]:
        try:
            return self._probe.query_is_behind(self._target)
        except ProbeError as e:
            logger.debug(f"Facing query failed: {e}")
            return None
