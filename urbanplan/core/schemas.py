"""
Value Objects for Scenario Runs

These schemas define the records exchanged between the scoring model,
the optimizer, the comparison engine and whatever store the hosting
application persists them to. Field names are the persisted JSON names,
so history written by one version stays readable by the next.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import InvalidParameters


PARAMETER_NAMES = ("roads", "population", "housing", "public_transport")
METRIC_NAMES = ("congestion", "satisfaction", "emissions", "transit_usage")

# +1: higher is better, -1: lower is better
METRIC_DIRECTIONS = {
    "congestion": -1,
    "satisfaction": 1,
    "emissions": -1,
    "transit_usage": 1,
}


# =============================================================================
# Parameters and Results
# =============================================================================

class Parameters(BaseModel):
    """The four planning sliders, each in [0, 100]."""
    model_config = ConfigDict(frozen=True)

    roads: float = Field(description="Road network capacity", ge=0, le=100, allow_inf_nan=False)
    population: float = Field(description="Population density", ge=0, le=100, allow_inf_nan=False)
    housing: float = Field(description="Housing supply", ge=0, le=100, allow_inf_nan=False)
    public_transport: float = Field(
        description="Public transport coverage", ge=0, le=100, allow_inf_nan=False
    )

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidParameters.from_validation_error(exc) from exc

    @field_validator(*PARAMETER_NAMES, mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> Any:
        # Lax float parsing would accept "50" and True
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        if isinstance(value, float) and math.isnan(value):
            raise ValueError("must not be NaN")
        return value

    @classmethod
    def from_mapping(cls, data: Any) -> "Parameters":
        """Validate a mapping (e.g. a decoded request body) into Parameters."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            raise InvalidParameters(
                f"Expected a mapping of planning parameters, got {type(data).__name__}",
                [{"field": "parameters", "message": "must be a mapping", "input": data}]
            )
        # model_validate would wrap the field errors raised by __init__
        return cls(**{str(key): value for key, value in data.items()})

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in PARAMETER_NAMES}


class Results(BaseModel):
    """Outcome metrics predicted by the scoring model, each in [0, 100]."""
    model_config = ConfigDict(frozen=True)

    congestion: float = Field(description="Traffic congestion level", ge=0, le=100)
    satisfaction: float = Field(description="Resident satisfaction", ge=0, le=100)
    emissions: float = Field(description="Emissions level", ge=0, le=100)
    transit_usage: float = Field(description="Share of trips on transit", ge=0, le=100)

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in METRIC_NAMES}


# =============================================================================
# Simulation Runs
# =============================================================================

class SimulationRun(BaseModel):
    """
    One evaluated scenario.

    Immutable once created. ``id`` stays None until a repository persists
    the run; corrections are made by creating a new run.
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(default=None, description="Assigned by the run repository")
    created_at: datetime = Field(default_factory=datetime.now)
    parameters: Parameters
    results: Results
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque to the core: name, description, tags, narrative text"
    )

    def with_id(self, run_id: str) -> "SimulationRun":
        """Copy of this run carrying its persisted id."""
        return self.model_copy(update={"id": run_id})

    @property
    def label(self) -> str:
        name = self.metadata.get("name")
        if name:
            return str(name)
        if self.id:
            return self.id
        return "unsaved run"


# =============================================================================
# Optimization
# =============================================================================

class OptimizationTarget(str, Enum):
    """What the optimizer is asked to improve."""
    CONGESTION = "congestion"
    SATISFACTION = "satisfaction"
    EMISSIONS = "emissions"
    TRANSIT_USAGE = "transit_usage"
    BALANCED = "balanced"


class OptimizationResult(BaseModel):
    """Best parameters found for one target, starting from a baseline run."""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    description: str = ""
    baseline_run: SimulationRun
    optimal_parameters: Parameters
    predicted_results: Results
    optimization_type: OptimizationTarget
    improvement_percentage: float = Field(
        description="Relative change of the target in its desired direction"
    )
    confidence_score: float = Field(ge=0.0, le=1.0)
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Search statistics: algorithm, rounds, evaluations, timing"
    )
    created_at: datetime = Field(default_factory=datetime.now)


# =============================================================================
# Comparison
# =============================================================================

class MetricComparison(BaseModel):
    """One metric's baseline value against every compared run."""
    model_config = ConfigDict(frozen=True)

    baseline_value: float
    compared_values: List[float]
    percentage_differences: List[float]
    absolute_differences: List[float] = Field(default_factory=list)


class ComparisonSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    key_findings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ComparisonMetric(BaseModel):
    """Relative differences between a baseline run and one or more others."""
    model_config = ConfigDict(frozen=True)

    name: str = "Simulation Comparison"
    description: str = ""
    baseline_run_id: Optional[str] = None
    compared_run_ids: List[Optional[str]] = Field(min_length=1)
    metrics: Dict[str, MetricComparison]
    summary: ComparisonSummary = Field(default_factory=ComparisonSummary)
    created_at: datetime = Field(default_factory=datetime.now)
