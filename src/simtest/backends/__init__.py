"""Simulator backend exports."""
from .simulator import SimulatorInvoker, SimulatorRun

__all__ = [
    "SimulatorInvoker",
    "SimulatorRun",
]
