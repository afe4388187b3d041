"""
Function-style entry points.

Thin wrappers around the engines built from the cached settings, for
callers that do not need to hold engine instances.
"""

from typing import Sequence, Union

from .comparison.engine import ComparisonEngine
from .config.settings import get_settings
from .core.schemas import (
    ComparisonMetric,
    OptimizationResult,
    OptimizationTarget,
    SimulationRun
)
from .optimization.engine import OptimizationEngine
from .scoring.model import score


def optimize(
    baseline: SimulationRun,
    target_metric: Union[OptimizationTarget, str]
) -> OptimizationResult:
    return OptimizationEngine(get_settings().optimizer).optimize(baseline, target_metric)


def optimize_all(baseline: SimulationRun) -> list[OptimizationResult]:
    return OptimizationEngine(get_settings().optimizer).optimize_all(baseline)


def compare(baseline: SimulationRun, others: Sequence[SimulationRun]) -> ComparisonMetric:
    return ComparisonEngine(get_settings().comparison).compare(baseline, others)


def compare_all(runs: Sequence[SimulationRun]) -> ComparisonMetric:
    return ComparisonEngine(get_settings().comparison).compare_all(runs)


__all__ = ["score", "optimize", "optimize_all", "compare", "compare_all"]
