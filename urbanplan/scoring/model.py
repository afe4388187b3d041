"""
Scenario Scoring Model

Closed-form mapping from the four planning parameters to the four outcome
metrics, each saturated to [0, 100]:

    congestion    = 100 - 0.8*roads - 0.5*public_transport + 0.7*population
    satisfaction  = 0.4*housing + 0.2*roads + 0.4*public_transport - 0.5*congestion
    emissions     = 0.6*population - 0.4*public_transport + 0.3*congestion
    transit_usage = 0.7*public_transport + 0.3*congestion

Congestion is clamped before it feeds the other three formulas.
"""

from typing import Any, Callable, Mapping, Union
import threading

from ..core.schemas import Parameters, Results

ParametersLike = Union[Parameters, Mapping[str, Any]]
Scorer = Callable[[Parameters], Results]


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))


def score(parameters: ParametersLike) -> Results:
    """
    Predict outcome metrics for a set of planning parameters.

    Raises InvalidParameters when a mapping is missing a field, holds a
    non-numeric value or a value outside [0, 100]. Inputs are never
    clamped; only outputs are.
    """
    p = Parameters.from_mapping(parameters)

    congestion = clamp(100 - p.roads * 0.8 - p.public_transport * 0.5 + p.population * 0.7)
    satisfaction = p.housing * 0.4 + p.roads * 0.2 + p.public_transport * 0.4 - congestion * 0.5
    emissions = p.population * 0.6 - p.public_transport * 0.4 + congestion * 0.3
    transit_usage = p.public_transport * 0.7 + congestion * 0.3

    return Results(
        congestion=congestion,
        satisfaction=clamp(satisfaction),
        emissions=clamp(emissions),
        transit_usage=clamp(transit_usage)
    )


class ScoringModel:
    """
    Injectable wrapper around ``score``.

    Keeps a thread-safe tally of every evaluation made through it, across
    simulations and searches.
    """

    def __init__(self, scorer: Scorer = score):
        self._scorer = scorer
        self._lock = threading.Lock()
        self.evaluations = 0

    def score(self, parameters: ParametersLike) -> Results:
        with self._lock:
            self.evaluations += 1
        return self._scorer(Parameters.from_mapping(parameters))

    __call__ = score
