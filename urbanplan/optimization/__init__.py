"""
Parameter optimization.

Coordinate search over the scoring model for a single target metric or a
balanced composite of all four.
"""

from .engine import (
    OptimizationEngine,
    SearchOutcome,
    DESIRED_DIRECTION,
    BALANCED_WEIGHTS,
    target_value,
    objective,
    confidence_from_improvement
)

__all__ = [
    "OptimizationEngine",
    "SearchOutcome",
    "DESIRED_DIRECTION",
    "BALANCED_WEIGHTS",
    "target_value",
    "objective",
    "confidence_from_improvement"
]
