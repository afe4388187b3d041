"""
Comparison Engine

Compares a baseline run against one or more other runs:
- Per-metric percentage and absolute differences
- Key findings for metrics whose relative change crosses a threshold
- Parameter recommendations drawn from the runs that moved each metric
  the right way

Works on SimulationRun records only; it never calls the scoring model.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence
import logging

from ..config.settings import ComparisonConfig
from ..core.exceptions import InsufficientRuns
from ..core.schemas import (
    METRIC_DIRECTIONS,
    METRIC_NAMES,
    PARAMETER_NAMES,
    ComparisonMetric,
    ComparisonSummary,
    MetricComparison,
    SimulationRun
)

logger = logging.getLogger(__name__)


@dataclass
class ParameterChange:
    """A parameter move shared by the best runs of one or more metrics."""
    parameter: str
    direction: str  # increase, decrease
    metrics: list = field(default_factory=list)


class ComparisonEngine:
    """
    Computes relative deltas between runs and synthesizes findings.

    Percentage differences are taken against ``max(baseline, epsilon)``
    so a zero baseline stays finite while sign and magnitude are kept.
    """

    def __init__(self, config: ComparisonConfig = None):
        self.config = config or ComparisonConfig()

    def percentage_difference(self, baseline_value: float, compared_value: float) -> float:
        return (compared_value - baseline_value) / max(baseline_value, self.config.epsilon) * 100

    def compare(
        self,
        baseline: SimulationRun,
        others: Sequence[SimulationRun],
        name: str = "Simulation Comparison",
        description: Optional[str] = None
    ) -> ComparisonMetric:
        """Compare a baseline run against one or more other runs."""
        others = list(others)
        if not others:
            raise InsufficientRuns("Comparison needs a baseline and at least one other run")

        metrics = {}
        for metric in METRIC_NAMES:
            baseline_value = getattr(baseline.results, metric)
            compared_values = [getattr(run.results, metric) for run in others]
            metrics[metric] = MetricComparison(
                baseline_value=baseline_value,
                compared_values=compared_values,
                percentage_differences=[
                    self.percentage_difference(baseline_value, value) for value in compared_values
                ],
                absolute_differences=[value - baseline_value for value in compared_values]
            )

        findings = self.key_findings(metrics, others)
        recommendations = self.recommendations(metrics, baseline, others)

        logger.info(
            "Compared run %s against %d run(s): %d finding(s), %d recommendation(s)",
            baseline.label, len(others), len(findings), len(recommendations)
        )

        return ComparisonMetric(
            name=name,
            description=description or (
                f"Comparison between {baseline.label} and {len(others)} other simulation(s)"
            ),
            baseline_run_id=baseline.id,
            compared_run_ids=[run.id for run in others],
            metrics=metrics,
            summary=ComparisonSummary(
                key_findings=findings,
                recommendations=recommendations
            )
        )

    def compare_all(self, runs: Sequence[SimulationRun]) -> ComparisonMetric:
        """Compare every run against the most recent one."""
        if len(runs) < 2:
            raise InsufficientRuns(f"Need at least 2 runs to compare, got {len(runs)}")

        ordered = sorted(runs, key=lambda run: run.created_at, reverse=True)
        return self.compare(
            ordered[0],
            ordered[1:],
            name="Comprehensive Simulation Comparison",
            description="Comparing all stored simulations against the most recent one"
        )

    def key_findings(
        self,
        metrics: dict[str, MetricComparison],
        others: Sequence[SimulationRun]
    ) -> list[str]:
        """
        One sentence per metric whose largest relative change reaches the
        significance threshold, largest change first.
        """
        ranked = []
        for metric, comparison in metrics.items():
            magnitudes = [abs(p) for p in comparison.percentage_differences]
            largest = max(magnitudes)
            if largest < self.config.significance_threshold:
                continue

            index = magnitudes.index(largest)
            change = comparison.percentage_differences[index]
            direction = "increased" if change > 0 else "decreased"
            label = metric.replace("_", " ").capitalize()
            ranked.append((
                largest,
                f"{label} {direction} by {largest:.1f}% in {others[index].label} "
                f"({comparison.baseline_value:.1f} -> {comparison.compared_values[index]:.1f})."
            ))

        # sort is stable: equal magnitudes keep metric order
        ranked.sort(key=lambda item: item[0], reverse=True)
        return [text for _, text in ranked]

    def recommendations(
        self,
        metrics: dict[str, MetricComparison],
        baseline: SimulationRun,
        others: Sequence[SimulationRun]
    ) -> list[str]:
        """
        Suggest parameter moves backed by more than one metric.

        For each metric, the run that moved it furthest in its desired
        direction is inspected; its parameter changes beyond the
        recommendation threshold are credited to that metric.
        """
        changes: dict[str, ParameterChange] = {}
        conflicting: set[str] = set()

        for metric, comparison in metrics.items():
            sign = METRIC_DIRECTIONS[metric]
            oriented = [sign * p for p in comparison.percentage_differences]
            best = max(oriented)
            if best <= 0:
                continue
            best_run = others[oriented.index(best)]

            for parameter in PARAMETER_NAMES:
                change = self.percentage_difference(
                    getattr(baseline.parameters, parameter),
                    getattr(best_run.parameters, parameter)
                )
                if abs(change) < self.config.recommendation_threshold:
                    continue

                direction = "increase" if change > 0 else "decrease"
                existing = changes.get(parameter)
                if existing is None:
                    changes[parameter] = ParameterChange(parameter, direction, [metric])
                elif existing.direction == direction:
                    existing.metrics.append(metric)
                else:
                    conflicting.add(parameter)

        recommendations = [
            f"Consider {change.direction[:-1]}ing {change.parameter} to improve "
            f"{' and '.join(change.metrics)}."
            for change in changes.values()
            if len(change.metrics) > 1
        ]

        if conflicting:
            recommendations.append(
                f"Note: {', '.join(sorted(conflicting))} helped some metrics when raised and "
                "others when lowered. Consider a balanced optimization."
            )

        return recommendations
