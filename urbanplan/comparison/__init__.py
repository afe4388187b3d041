"""Run comparison: relative deltas, key findings and recommendations."""

from .engine import ComparisonEngine, ParameterChange

__all__ = ["ComparisonEngine", "ParameterChange"]
