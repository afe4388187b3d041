"""
Optimization Engine

Searches the four-dimensional parameter space for a configuration that
moves a target metric in its desired direction:

- congestion, emissions: lower is better
- satisfaction, transit_usage: higher is better
- balanced: maximize satisfaction + transit_usage - congestion - emissions

The scoring model exposes no gradient and has only four bounded inputs,
so the search is a plain coordinate search: each round visits every
parameter and tries a step up and a step down, keeping the better move
only if it strictly improves the objective. The step halves after a
round with no accepted move.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union
import logging
import time

from ..config.settings import OptimizerConfig
from ..core.schemas import (
    METRIC_DIRECTIONS,
    PARAMETER_NAMES,
    OptimizationResult,
    OptimizationTarget,
    Parameters,
    Results,
    SimulationRun
)
from ..scoring.model import ScoringModel, clamp

logger = logging.getLogger(__name__)

StopCallback = Callable[[], bool]

DESIRED_DIRECTION = {
    **{OptimizationTarget(name): sign for name, sign in METRIC_DIRECTIONS.items()},
    OptimizationTarget.BALANCED: 1,
}

BALANCED_WEIGHTS = {
    "satisfaction": 1.0,
    "transit_usage": 1.0,
    "congestion": -1.0,
    "emissions": -1.0,
}


def target_value(results: Results, target: OptimizationTarget) -> float:
    """Raw value of the target metric, or the weighted composite for balanced."""
    if target is OptimizationTarget.BALANCED:
        return sum(weight * getattr(results, name) for name, weight in BALANCED_WEIGHTS.items())
    return getattr(results, target.value)


def objective(results: Results, target: OptimizationTarget) -> float:
    """Target value oriented so that larger is always better."""
    return DESIRED_DIRECTION[target] * target_value(results, target)


def confidence_from_improvement(improvement_percentage: float) -> float:
    """0 without improvement, rising from 0.5 towards 1.0 as improvement grows."""
    if improvement_percentage <= 0:
        return 0.0
    return min(1.0, 0.5 + improvement_percentage / 200)


@dataclass
class SearchOutcome:
    """Bookkeeping for one coordinate search."""
    parameters: Parameters
    objective: float
    rounds: int = 0
    accepted_moves: int = 0
    evaluations: int = 0
    final_step: float = 0.0
    cancelled: bool = False


class OptimizationEngine:
    """
    Coordinate-search optimizer over the scoring model.

    Never raises for a well-formed baseline: a search that finds nothing
    better returns the baseline parameters with zero improvement and zero
    confidence.
    """

    def __init__(
        self,
        config: OptimizerConfig = None,
        scoring_model: ScoringModel = None
    ):
        self.config = config or OptimizerConfig()
        self.scoring_model = scoring_model or ScoringModel()

    def optimize(
        self,
        baseline: SimulationRun,
        target_metric: Union[OptimizationTarget, str],
        should_stop: Optional[StopCallback] = None
    ) -> OptimizationResult:
        """
        Optimize one target starting from the baseline run's parameters.

        ``should_stop`` is polled between rounds; a stopped search still
        returns the best point found so far.
        """
        target = OptimizationTarget(target_metric)
        started = time.perf_counter()

        baseline_results = self.scoring_model.score(baseline.parameters)
        outcome = self._search(baseline.parameters, baseline_results, target, should_stop)

        if outcome.accepted_moves == 0:
            optimal_parameters = baseline.parameters
            predicted_results = baseline_results
            improvement = 0.0
        else:
            optimal_parameters = outcome.parameters
            predicted_results = self.scoring_model.score(optimal_parameters)
            improvement = self._improvement_percentage(baseline_results, predicted_results, target)

        confidence = confidence_from_improvement(improvement)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.info(
            "Optimized %s for run %s: %+.2f%% (confidence %.2f, %d rounds, %d evaluations)",
            target.value, baseline.label, improvement, confidence,
            outcome.rounds, outcome.evaluations
        )

        title = target.value.replace("_", " ").title()
        return OptimizationResult(
            name=f"{title} Optimization",
            description=f"Optimized parameters for {target.value} based on simulation {baseline.label}",
            baseline_run=baseline,
            optimal_parameters=optimal_parameters,
            predicted_results=predicted_results,
            optimization_type=target,
            improvement_percentage=improvement,
            confidence_score=confidence,
            metadata={
                "algorithm": "coordinate_search",
                "max_rounds": self.config.max_rounds,
                "rounds": outcome.rounds,
                "evaluations": outcome.evaluations,
                "accepted_moves": outcome.accepted_moves,
                "initial_step": self.config.initial_step,
                "final_step": outcome.final_step,
                "cancelled": outcome.cancelled,
                "execution_time_ms": elapsed_ms,
            }
        )

    def optimize_all(
        self,
        baseline: SimulationRun,
        should_stop: Optional[StopCallback] = None
    ) -> list[OptimizationResult]:
        """Run one optimization per target, balanced last."""
        return [
            self.optimize(baseline, target, should_stop=should_stop)
            for target in OptimizationTarget
        ]

    def _search(
        self,
        start: Parameters,
        start_results: Results,
        target: OptimizationTarget,
        should_stop: Optional[StopCallback]
    ) -> SearchOutcome:
        current = start.as_dict()
        outcome = SearchOutcome(parameters=start, objective=objective(start_results, target))
        step = self.config.initial_step

        while outcome.rounds < self.config.max_rounds and step >= self.config.min_step:
            if should_stop is not None and should_stop():
                outcome.cancelled = True
                logger.info("Search for %s stopped after %d rounds", target.value, outcome.rounds)
                break

            outcome.rounds += 1
            improved = False

            for name in PARAMETER_NAMES:
                best_move = None
                for delta in (step, -step):
                    value = clamp(current[name] + delta)
                    if value == current[name]:
                        continue
                    candidate = dict(current, **{name: value})
                    outcome.evaluations += 1
                    candidate_objective = objective(self.scoring_model.score(candidate), target)
                    # Ties are rejected so the search cannot drift on plateaus
                    if candidate_objective > outcome.objective and (
                        best_move is None or candidate_objective > best_move[1]
                    ):
                        best_move = (candidate, candidate_objective)

                if best_move is not None:
                    current, outcome.objective = best_move
                    outcome.accepted_moves += 1
                    improved = True
                    logger.debug(
                        "Round %d: %s -> %.4g (objective %.4f, step %.4g)",
                        outcome.rounds, name, current[name], outcome.objective, step
                    )

            if not improved:
                step /= 2

        outcome.parameters = Parameters(**current)
        outcome.final_step = step
        return outcome

    def _improvement_percentage(
        self,
        baseline_results: Results,
        optimal_results: Results,
        target: OptimizationTarget
    ) -> float:
        before = target_value(baseline_results, target)
        gain = objective(optimal_results, target) - objective(baseline_results, target)
        return gain / max(abs(before), self.config.improvement_floor) * 100
