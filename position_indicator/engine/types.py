"""Type definitions for the proximity state engine."""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


# Crossfade duration in seconds
FADE_DURATION_S = 0.15

# Distance below which the target counts as in melee range
MELEE_EPSILON = 0.01


class VisualState(Enum):
    """
    Discrete indicator state.

    Exactly one state is displayed at any time. HIDDEN has no texture.
    """
    HIDDEN = "hidden"
    OUT_OF_RANGE = "out"
    IN_RANGE_FRONT = "in"
    IN_RANGE_BEHIND = "behind"

    @property
    def has_texture(self) -> bool:
        """True for every state that draws an image."""
        return self is not VisualState.HIDDEN

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        names = {
            VisualState.HIDDEN: "Hidden",
            VisualState.OUT_OF_RANGE: "Out of range",
            VisualState.IN_RANGE_FRONT: "In range (front)",
            VisualState.IN_RANGE_BEHIND: "In range (behind)",
        }
        return names[self]


class TargetEvent(Enum):
    """Target-lifecycle signals raised by the game-state layer."""
    TARGET_ACQUIRED = "target_acquired"
    TARGET_LOST = "target_lost"
    TARGET_DIED = "target_died"
    PLAYER_DIED = "player_died"
    WORLD_ENTERED = "world_entered"
    INCAPACITATION_ENDED = "incapacitation_ended"


@dataclass(frozen=True)
class TargetValidity:
    """Current target validity as computed by the game-state layer."""
    exists: bool = False
    attackable: bool = False
    alive: bool = False

    @property
    def is_valid(self) -> bool:
        """A target is trackable only if it exists, is attackable and alive."""
        return self.exists and self.attackable and self.alive


NO_TARGET = TargetValidity()


@dataclass
class TrackingContext:
    """
    Tracking state owned by the engine.

    Invariants:
        has_valid_target is False whenever is_tracking is False.
        in_melee and is_behind are False whenever has_valid_target is False.
    """
    is_tracking: bool = False
    has_valid_target: bool = False
    in_melee: bool = False
    is_behind: bool = False

    def activate(self) -> None:
        """Begin tracking a freshly validated target."""
        self.is_tracking = True
        self.has_valid_target = True
        self.in_melee = False
        self.is_behind = False

    def reset(self) -> None:
        """Drop the target and all derived flags."""
        self.is_tracking = False
        self.has_valid_target = False
        self.in_melee = False
        self.is_behind = False


@dataclass
class FadeTransition:
    """
    An in-flight crossfade between two state images.

    Attributes:
        from_state: Outgoing image (None when fading in from HIDDEN)
        to_state: Incoming image (None when fading out to HIDDEN)
        elapsed_s: Time spent in this fade so far
        from_alpha: Opacity of the outgoing image when the fade began
        to_alpha: Opacity of the incoming image when the fade began
        duration_s: Fade length
    """
    from_state: Optional[VisualState]
    to_state: Optional[VisualState]
    elapsed_s: float = 0.0
    from_alpha: float = 1.0
    to_alpha: float = 0.0
    duration_s: float = FADE_DURATION_S

    def __post_init__(self):
        """Validate fade endpoints."""
        if self.from_state is None and self.to_state is None:
            raise ValueError("A fade needs at least one image")
        if self.duration_s <= 0:
            raise ValueError(f"duration_s must be positive, got {self.duration_s}")

    @property
    def progress(self) -> float:
        """Fraction of the fade completed (may exceed 1.0 on the final tick)."""
        return self.elapsed_s / self.duration_s


@dataclass
class LayerState:
    """One of the two stacked indicator images."""
    texture: Optional[VisualState] = None
    alpha: float = 0.0
    visible: bool = False

    def show(self, texture: VisualState, alpha: float) -> None:
        self.texture = texture
        self.alpha = alpha
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    @property
    def rendered_alpha(self) -> float:
        """Opacity this layer currently contributes to the picture."""
        if not self.visible or self.texture is None:
            return 0.0
        return self.alpha


@dataclass
class RenderSurface:
    """
    Per-tick output for the render surface.

    main is the incoming (artwork) layer, fade the outgoing (background)
    layer drawn underneath it.
    """
    indicator_visible: bool = False
    main: LayerState = field(default_factory=LayerState)
    fade: LayerState = field(default_factory=LayerState)

    def copy(self) -> "RenderSurface":
        """Return a detached snapshot."""
        return RenderSurface(
            indicator_visible=self.indicator_visible,
            main=LayerState(self.main.texture, self.main.alpha, self.main.visible),
            fade=LayerState(self.fade.texture, self.fade.alpha, self.fade.visible),
        )


@dataclass(frozen=True)
class EngineStatus:
    """Snapshot of engine state for status reporting."""
    enabled: bool
    is_tracking: bool
    has_valid_target: bool
    in_melee: bool
    is_behind: bool
    state: VisualState
    is_fading: bool
    fade_progress: float
    poll_interval_s: float
