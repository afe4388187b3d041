"""
Unit tests for the coordinate-search optimizer.
"""

import itertools

import pytest
from pydantic import ValidationError

from urbanplan.config import OptimizerConfig
from urbanplan.core import OptimizationTarget, SimulationRun
from urbanplan.optimization import (
    DESIRED_DIRECTION,
    OptimizationEngine,
    confidence_from_improvement,
    objective,
    target_value
)
from urbanplan.scoring import ScoringModel, score


SATURATED = {"roads": 100, "population": 0, "housing": 100, "public_transport": 100}


@pytest.fixture
def engine():
    return OptimizationEngine(OptimizerConfig())


class TestOptimize:
    """Tests for single-target optimization."""

    def test_reduces_congestion(self, engine, baseline_run):
        result = engine.optimize(baseline_run, "congestion")

        assert result.optimization_type is OptimizationTarget.CONGESTION
        assert result.predicted_results.congestion < baseline_run.results.congestion
        assert result.improvement_percentage > 0
        assert 0.5 < result.confidence_score <= 1.0
        assert result.baseline_run == baseline_run

    def test_predicted_results_match_optimal_parameters(self, engine, baseline_run):
        result = engine.optimize(baseline_run, OptimizationTarget.TRANSIT_USAGE)
        assert result.predicted_results == score(result.optimal_parameters)

    @pytest.mark.parametrize("target", list(OptimizationTarget))
    def test_never_regresses_target(self, engine, make_run, target):
        levels = [0, 35, 100]
        for roads, population, housing, transport in itertools.product(levels, repeat=4):
            baseline = make_run({
                "roads": roads,
                "population": population,
                "housing": housing,
                "public_transport": transport
            })
            result = engine.optimize(baseline, target)

            before = objective(baseline.results, target)
            after = objective(result.predicted_results, target)
            assert after >= before
            assert result.improvement_percentage >= 0

    def test_improvement_percentage_for_decreasing_metric(self, engine, baseline_run):
        result = engine.optimize(baseline_run, "emissions")

        before = baseline_run.results.emissions
        after = result.predicted_results.emissions
        assert result.improvement_percentage == pytest.approx((before - after) / before * 100)

    def test_balanced_improves_composite(self, engine, baseline_run):
        result = engine.optimize(baseline_run, "balanced")

        before = target_value(baseline_run.results, OptimizationTarget.BALANCED)
        after = target_value(result.predicted_results, OptimizationTarget.BALANCED)
        assert after > before
        assert result.improvement_percentage == pytest.approx((after - before) / abs(before) * 100)

    def test_metadata(self, engine, baseline_run):
        result = engine.optimize(baseline_run, "satisfaction")

        assert result.name == "Satisfaction Optimization"
        assert result.metadata["algorithm"] == "coordinate_search"
        assert 1 <= result.metadata["rounds"] <= engine.config.max_rounds
        assert result.metadata["evaluations"] > 0
        assert result.metadata["accepted_moves"] > 0
        assert result.metadata["cancelled"] is False

    def test_evaluations_count_only_this_search(self, baseline_run):
        calls = []
        extra = []

        def busy_scorer(parameters):
            calls.append(parameters)
            # another user of the shared model scores once mid-search
            if len(calls) == 2:
                extra.append(parameters)
                model.score(parameters)
            return score(parameters)

        model = ScoringModel(busy_scorer)
        engine = OptimizationEngine(OptimizerConfig(), model)

        result = engine.optimize(baseline_run, "congestion")

        # baseline and optimum are scored outside the search itself
        assert result.metadata["evaluations"] == model.evaluations - len(extra) - 2

    def test_unknown_target(self, engine, baseline_run):
        with pytest.raises(ValueError):
            engine.optimize(baseline_run, "happiness")


class TestNoImprovement:
    """A search that finds nothing better is a valid outcome."""

    @pytest.mark.parametrize("target", ["congestion", "emissions", "satisfaction"])
    def test_saturated_baseline(self, engine, make_run, target):
        baseline = make_run(SATURATED)

        result = engine.optimize(baseline, target)

        assert result.optimal_parameters == baseline.parameters
        assert result.predicted_results == baseline.results
        assert result.improvement_percentage == 0
        assert result.confidence_score == 0
        assert result.metadata["accepted_moves"] == 0

    def test_step_halves_until_minimum(self, engine, make_run):
        result = engine.optimize(make_run(SATURATED), "congestion")

        # 10 -> 5 -> 2.5 -> 1.25 -> 0.625
        assert result.metadata["rounds"] == 4
        assert result.metadata["final_step"] < engine.config.min_step

    def test_stop_before_first_round(self, engine, baseline_run):
        result = engine.optimize(baseline_run, "congestion", should_stop=lambda: True)

        assert result.metadata["cancelled"] is True
        assert result.metadata["rounds"] == 0
        assert result.optimal_parameters == baseline_run.parameters
        assert result.confidence_score == 0

    def test_stop_between_rounds_keeps_best_so_far(self, engine, baseline_run):
        calls = []

        def stop_after_one_round():
            calls.append(1)
            return len(calls) > 1

        result = engine.optimize(baseline_run, "congestion", should_stop=stop_after_one_round)

        assert result.metadata["rounds"] == 1
        assert result.metadata["cancelled"] is True
        assert result.predicted_results.congestion < baseline_run.results.congestion


class TestOptimizeAll:
    def test_one_result_per_target(self, engine, baseline_run):
        results = engine.optimize_all(baseline_run)

        assert len(results) == 5
        assert [r.optimization_type for r in results] == [
            OptimizationTarget.CONGESTION,
            OptimizationTarget.SATISFACTION,
            OptimizationTarget.EMISSIONS,
            OptimizationTarget.TRANSIT_USAGE,
            OptimizationTarget.BALANCED,
        ]
        assert set(r.optimization_type for r in results) == set(DESIRED_DIRECTION)


class TestConfidence:
    def test_zero_without_improvement(self):
        assert confidence_from_improvement(0.0) == 0.0

    def test_increases_with_improvement(self):
        assert confidence_from_improvement(10) < confidence_from_improvement(50)
        assert confidence_from_improvement(10) == pytest.approx(0.55)

    def test_bounded(self):
        assert confidence_from_improvement(5000) == 1.0


class TestOptimizerConfig:
    def test_round_budget_has_floor(self):
        with pytest.raises(ValidationError):
            OptimizerConfig(max_rounds=5)

    def test_round_budget_respected(self, make_run):
        engine = OptimizationEngine(OptimizerConfig(max_rounds=20, initial_step=0.5, min_step=0.01))
        result = engine.optimize(make_run(), "transit_usage")

        assert result.metadata["rounds"] == 20
        assert isinstance(result.baseline_run, SimulationRun)
