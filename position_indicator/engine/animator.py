"""Crossfade animation between indicator state images."""

import logging
from typing import Optional, Tuple

from .types import VisualState, FadeTransition, LayerState, RenderSurface, FADE_DURATION_S


logger = logging.getLogger(__name__)


class CrossfadeAnimator:
    """
    Owns the displayed VisualState and blends between state images.

    The discrete state flips as soon as a transition begins; only the
    opacities of the two layers blend over the fade duration:
    - main layer: the incoming image, fading in
    - fade layer: the outgoing image, fading out underneath

    A transition that interrupts a running fade starts from what is on screen
    right now. A layer already showing the new image keeps its opacity as the
    incoming start value, and the most opaque other layer becomes the
    outgoing image at its current opacity, so nothing jumps back to full
    opacity. Only two layers exist, so a weaker third image (e.g. IN at 0.3
    when OUT->IN is cut by BEHIND) is dropped immediately.

    State machine:
        HIDDEN <-> OUT_OF_RANGE <-> IN_RANGE_FRONT <-> IN_RANGE_BEHIND
        (any state may transition to any other; no terminal state)
    """

    def __init__(self, duration_s: float = FADE_DURATION_S):
        """
        Initialize animator.

        Args:
            duration_s: Crossfade duration in seconds
        """
        if duration_s <= 0:
            raise ValueError(f"duration_s must be positive, got {duration_s}")
        self._duration_s = duration_s
        self._state = VisualState.HIDDEN
        self._fade: Optional[FadeTransition] = None
        self._surface = RenderSurface()

    @property
    def state(self) -> VisualState:
        """Currently displayed discrete state."""
        return self._state

    @property
    def is_fading(self) -> bool:
        return self._fade is not None

    @property
    def fade(self) -> Optional[FadeTransition]:
        """The in-flight transition, if any."""
        return self._fade

    @property
    def surface(self) -> RenderSurface:
        """Snapshot of the current layer opacities."""
        return self._surface.copy()

    def begin_transition(self, new_state: VisualState) -> bool:
        """
        Start fading towards new_state.

        Args:
            new_state: State to display

        Returns:
            True if a transition began, False if new_state is already displayed
        """
        if new_state == self._state:
            return False

        old_state = self._state
        to_texture = new_state if new_state.has_texture else None

        if self._fade is not None:
            from_texture, from_alpha, to_alpha = self._snapshot(to_texture)
        else:
            from_texture = old_state if old_state.has_texture else None
            from_alpha, to_alpha = 1.0, 0.0

        logger.debug(f"Transition: {old_state.value} -> {new_state.value}")
        self._state = new_state

        if from_texture is None and to_texture is None:
            # Nothing on screen to blend away
            self._fade = None
            self._surface.main.hide()
            self._surface.fade.hide()
            self._surface.indicator_visible = False
            return True

        self._fade = FadeTransition(
            from_state=from_texture,
            to_state=to_texture,
            elapsed_s=0.0,
            from_alpha=from_alpha,
            to_alpha=to_alpha,
            duration_s=self._duration_s,
        )

        if from_texture is not None:
            self._surface.fade.show(from_texture, from_alpha)
        else:
            self._surface.fade.hide()

        if to_texture is not None:
            self._surface.main.show(to_texture, to_alpha)
            self._surface.indicator_visible = True
        else:
            self._surface.main.hide()

        return True

    def on_tick(self, delta_s: float) -> RenderSurface:
        """
        Advance the running fade.

        Args:
            delta_s: Elapsed seconds since the previous tick

        Returns:
            Snapshot of the layer opacities after this tick
        """
        fade = self._fade
        if fade is None:
            return self.surface

        fade.elapsed_s += max(0.0, delta_s)
        progress = fade.progress

        if progress >= 1.0:
            self._complete(fade)
        else:
            if fade.to_state is not None:
                self._surface.main.alpha = fade.to_alpha + (1.0 - fade.to_alpha) * progress
            if fade.from_state is not None:
                self._surface.fade.alpha = fade.from_alpha * (1.0 - progress)

        return self.surface

    def _complete(self, fade: FadeTransition) -> None:
        """Settle the layers at the end of a fade."""
        if fade.to_state is not None:
            self._surface.main.show(fade.to_state, 1.0)
        else:
            self._surface.main.hide()
            self._surface.indicator_visible = False
        self._surface.fade.hide()
        self._fade = None

    def _snapshot(
        self,
        to_texture: Optional[VisualState],
    ) -> Tuple[Optional[VisualState], float, float]:
        """
        Capture the on-screen layers when a fade is interrupted.

        Returns:
            (outgoing texture, outgoing start alpha, incoming start alpha)
        """
        to_alpha = 0.0
        candidates = []
        # main first so it wins ties
        for layer in (self._surface.main, self._surface.fade):
            if not layer.visible or layer.texture is None:
                continue
            if to_texture is not None and layer.texture == to_texture:
                to_alpha = max(to_alpha, layer.alpha)
            else:
                candidates.append(layer)

        if not candidates:
            return None, 0.0, to_alpha

        outgoing: LayerState = max(candidates, key=lambda layer: layer.alpha)
        return outgoing.texture, outgoing.alpha, to_alpha
