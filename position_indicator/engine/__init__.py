"""Proximity state engine - poll scheduling, classification and crossfade."""

from .types import (
    VisualState,
    TargetEvent,
    TargetValidity,
    TrackingContext,
    FadeTransition,
    LayerState,
    RenderSurface,
    EngineStatus,
)
from .poll_timer import PollTimer
from .classifier import ProximityClassifier, PollResult, PollStatus, classify_state
from .animator import CrossfadeAnimator
from .indicator import ProximityEngine, create_engine

__all__ = [
    "VisualState",
    "TargetEvent",
    "TargetValidity",
    "TrackingContext",
    "FadeTransition",
    "LayerState",
    "RenderSurface",
    "EngineStatus",
    "PollTimer",
    "ProximityClassifier",
    "PollResult",
    "PollStatus",
    "classify_state",
    "CrossfadeAnimator",
    "ProximityEngine",
    "create_engine",
]
