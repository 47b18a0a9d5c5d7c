"""
Range/facing probes.

Provides the probe interface plus scripted and simulated implementations.
"""

from .base import Probe, ProbeError
from .scripted import ScriptedProbe, ProbeReading
from .simulated import SimulatedProbe, create_probe

__all__ = [
    "Probe",
    "ProbeError",
    "ScriptedProbe",
    "ProbeReading",
    "SimulatedProbe",
    "create_probe",
]
