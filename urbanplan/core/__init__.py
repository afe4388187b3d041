"""
Core value objects and error kinds.

Parameters, Results and SimulationRun flow through every component;
OptimizationResult and ComparisonMetric are produced by the engines and
handed back to the caller for persistence.
"""

from .exceptions import (
    UrbanPlanError,
    InvalidParameters,
    InsufficientRuns,
    AlreadyRunning,
    InvalidStateTransition
)
from .schemas import (
    PARAMETER_NAMES,
    METRIC_NAMES,
    METRIC_DIRECTIONS,
    Parameters,
    Results,
    SimulationRun,
    OptimizationTarget,
    OptimizationResult,
    MetricComparison,
    ComparisonSummary,
    ComparisonMetric
)

__all__ = [
    "UrbanPlanError",
    "InvalidParameters",
    "InsufficientRuns",
    "AlreadyRunning",
    "InvalidStateTransition",
    "PARAMETER_NAMES",
    "METRIC_NAMES",
    "METRIC_DIRECTIONS",
    "Parameters",
    "Results",
    "SimulationRun",
    "OptimizationTarget",
    "OptimizationResult",
    "MetricComparison",
    "ComparisonSummary",
    "ComparisonMetric"
]
