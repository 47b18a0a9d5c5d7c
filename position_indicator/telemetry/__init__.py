"""
Telemetry and logging module for the position indicator.

Provides engine counters and JSON Lines logging of state transitions.
"""

from .logger import TelemetryLogger, TransitionRecord
from .metrics import EngineMetrics, FPSCounter, LatencyTracker

__all__ = [
    "TelemetryLogger",
    "TransitionRecord",
    "EngineMetrics",
    "FPSCounter",
    "LatencyTracker",
]
