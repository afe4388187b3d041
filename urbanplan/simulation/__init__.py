"""
Simulation session orchestration.

The controller owns the Idle -> Running -> {Completed, Cancelled} state
machine for one session and forwards optimization and comparison
requests to the engines.
"""

from .controller import (
    SimulationController,
    SimulationState,
    RunHandle,
    ProgressObserver
)

__all__ = [
    "SimulationController",
    "SimulationState",
    "RunHandle",
    "ProgressObserver"
]
