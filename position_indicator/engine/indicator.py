"""
Proximity engine - polls the probe, classifies, and animates the indicator.

The engine is single-threaded and tick-driven. The host calls on_tick() once
per rendered frame with the elapsed time; nothing inside the engine sleeps,
spawns threads or owns timers.
"""

import logging
from dataclasses import replace
from typing import Callable, Optional

from position_indicator.probe.base import Probe
from position_indicator.telemetry.metrics import EngineMetrics

from .types import (
    VisualState,
    TargetEvent,
    TargetValidity,
    TrackingContext,
    RenderSurface,
    EngineStatus,
    NO_TARGET,
    FADE_DURATION_S,
)
from .poll_timer import PollTimer, DEFAULT_POLL_INTERVAL_S
from .classifier import ProximityClassifier, PollResult, PollStatus, classify_context
from .animator import CrossfadeAnimator


logger = logging.getLogger(__name__)


# (old_state, new_state, context, interrupted)
TransitionListener = Callable[[VisualState, VisualState, TrackingContext, bool], None]


class ProximityEngine:
    """
    Owns the tracking lifecycle and every piece of derived state.

    Per tick:
    1. Poll scheduling (only while tracking)
    2. Classification and any resulting transition
    3. Fade animation update

    Polling runs before the fade update so a transition requested this tick
    already contributes opacity in the same tick.

    Usage:
        engine = ProximityEngine(probe, poll_interval_s=0.2)
        engine.handle_event(TargetEvent.TARGET_ACQUIRED, validity)

        # In render loop:
        surface = engine.on_tick(delta_s)
    """

    def __init__(
        self,
        probe: Probe,
        target: str = "target",
        enabled: bool = True,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        fade_duration_s: float = FADE_DURATION_S,
        on_transition: Optional[TransitionListener] = None,
    ):
        """
        Initialize engine.

        Args:
            probe: Range/facing probe
            target: Target reference passed to the probe
            enabled: Initial enabled flag
            poll_interval_s: Poll interval, already clamped to [0.05, 0.5]
            fade_duration_s: Crossfade duration
            on_transition: Called after every accepted state transition
        """
        self._enabled = enabled
        self._context = TrackingContext()
        self._timer = PollTimer(interval_s=poll_interval_s)
        self._classifier = ProximityClassifier(probe, target=target)
        self._animator = CrossfadeAnimator(duration_s=fade_duration_s)
        self._on_transition = on_transition
        self._metrics = EngineMetrics()

        logger.info(
            f"ProximityEngine initialized: enabled={enabled}, "
            f"poll_interval={poll_interval_s}s, target='{target}'"
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def context(self) -> TrackingContext:
        """Copy of the tracking context."""
        return replace(self._context)

    @property
    def state(self) -> VisualState:
        """Currently displayed state."""
        return self._animator.state

    @property
    def is_fading(self) -> bool:
        return self._animator.is_fading

    @property
    def surface(self) -> RenderSurface:
        return self._animator.surface

    @property
    def poll_timer(self) -> PollTimer:
        return self._timer

    @property
    def poll_interval_s(self) -> float:
        return self._timer.interval_s

    @property
    def metrics(self) -> EngineMetrics:
        return self._metrics

    def status(self) -> EngineStatus:
        """Snapshot of engine state."""
        fade = self._animator.fade
        return EngineStatus(
            enabled=self._enabled,
            is_tracking=self._context.is_tracking,
            has_valid_target=self._context.has_valid_target,
            in_melee=self._context.in_melee,
            is_behind=self._context.is_behind,
            state=self._animator.state,
            is_fading=fade is not None,
            fade_progress=min(1.0, fade.progress) if fade is not None else 0.0,
            poll_interval_s=self._timer.interval_s,
        )

    # ------------------------------------------------------------------
    # Tracking lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin tracking the current target. The caller has validated it."""
        logger.debug("start() called")
        if not self._enabled:
            return

        self._context.activate()
        self._timer.preset()  # Poll on the next tick
        self._metrics.starts += 1
        self._request_transition(classify_context(self._context, self._enabled))

    def stop(self) -> None:
        """Stop tracking and fade the indicator out."""
        logger.debug("stop() called")
        self._context.reset()
        self._timer.reset()
        self._metrics.stops += 1
        self._request_transition(VisualState.HIDDEN)

    def set_enabled(self, enabled: bool, validity: Optional[TargetValidity] = None) -> None:
        """
        Enable or disable the indicator.

        Args:
            enabled: New enabled flag
            validity: Current target validity; when given, enabling starts
                tracking a valid target and stops otherwise
        """
        self._enabled = enabled
        logger.info(f"Indicator {'enabled' if enabled else 'disabled'}")

        if not enabled:
            self.stop()
        elif validity is not None:
            if validity.is_valid:
                self.start()
            else:
                self.stop()

    def set_poll_interval(self, interval_s: float) -> None:
        """Change the poll interval (already clamped by configuration)."""
        self._timer.set_interval(interval_s)

    def handle_event(self, event: TargetEvent, validity: TargetValidity = NO_TARGET) -> None:
        """
        React to a target-lifecycle signal.

        Args:
            event: The signal
            validity: Target validity at the time of the signal
        """
        logger.debug(f"Event {event.value}: valid={validity.is_valid}")

        if event == TargetEvent.TARGET_ACQUIRED:
            if validity.is_valid:
                self.start()
            else:
                self.stop()
        elif event in (
            TargetEvent.TARGET_LOST,
            TargetEvent.TARGET_DIED,
            TargetEvent.PLAYER_DIED,
        ):
            self.stop()
        elif event in (TargetEvent.WORLD_ENTERED, TargetEvent.INCAPACITATION_ENDED):
            if self._enabled and validity.is_valid:
                self.start()
            else:
                self.stop()

    # ------------------------------------------------------------------
    # Per-tick update
    # ------------------------------------------------------------------

    def on_tick(self, delta_s: float) -> RenderSurface:
        """
        Advance the engine by one host frame.

        Args:
            delta_s: Seconds elapsed since the previous tick

        Returns:
            Layer opacities to render this tick
        """
        self._metrics.ticks += 1

        # Idle: nothing to poll, nothing to animate
        if not self._context.is_tracking and not self._animator.is_fading:
            return self._animator.surface

        if self._context.is_tracking and self._timer.tick(delta_s):
            self.poll()

        was_fading = self._animator.is_fading
        surface = self._animator.on_tick(delta_s)
        if was_fading and not self._animator.is_fading:
            self._metrics.completed_fades += 1
        return surface

    def poll(self) -> PollResult:
        """Query the probe once and apply the result. No-op unless tracking."""
        if not self._context.is_tracking:
            return PollResult(status=PollStatus.NO_DATA)

        result = self._classifier.poll(self._context, self._enabled)
        self._metrics.polls += 1

        if result.status == PollStatus.NO_DATA:
            self._metrics.probe_errors += 1
        elif result.status == PollStatus.TARGET_DEAD:
            self.stop()
        elif result.status == PollStatus.CHANGED and result.state is not None:
            self._request_transition(result.state)

        return result

    def _request_transition(self, new_state: VisualState) -> None:
        """Hand a state to the animator and record accepted transitions."""
        old_state = self._animator.state
        interrupted = self._animator.is_fading

        if not self._animator.begin_transition(new_state):
            return

        self._metrics.transitions += 1
        if interrupted:
            self._metrics.interrupted_fades += 1

        if self._on_transition is not None:
            self._on_transition(old_state, new_state, replace(self._context), interrupted)


def create_engine(
    config,
    probe: Probe,
    on_transition: Optional[TransitionListener] = None,
) -> ProximityEngine:
    """
    Factory function to create a ProximityEngine from configuration.

    Args:
        config: IndicatorConfig section
        probe: Range/facing probe
        on_transition: Optional transition listener

    Returns:
        Configured ProximityEngine instance
    """
    return ProximityEngine(
        probe=probe,
        target=config.target,
        enabled=config.enabled,
        poll_interval_s=config.poll_interval,
        on_transition=on_transition,
    )
