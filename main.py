#!/usr/bin/env python3
"""
Urban Scenario Core - Demo

This script walks through one dashboard session:
1. Simulate a baseline scenario and a few variations
2. Persist them in an in-memory run repository
3. Optimize the baseline for every target
4. Compare the stored runs
"""

from urbanplan.config import configure_logging, get_settings
from urbanplan.core import METRIC_NAMES
from urbanplan.repository import InMemoryRunRepository
from urbanplan.simulation import SimulationController


SCENARIOS = [
    ("Baseline", {"roads": 50, "population": 50, "housing": 50, "public_transport": 50}),
    ("Transit push", {"roads": 40, "population": 55, "housing": 50, "public_transport": 80}),
    ("Road expansion", {"roads": 85, "population": 60, "housing": 45, "public_transport": 30}),
    ("Densification", {"roads": 50, "population": 80, "housing": 75, "public_transport": 60}),
]


def print_results(results) -> None:
    for metric in METRIC_NAMES:
        print(f"    {metric:<15} {getattr(results, metric):6.1f}")


def run_simulation_demo(controller, repository):
    """Simulate every scenario and store the finished runs."""
    print("=" * 60)
    print("SIMULATIONS")
    print("=" * 60)
    print()

    def show_progress(handle, progress):
        print(f"  [{progress:5.1f}%] {handle.id}")

    controller.add_progress_observer(show_progress)

    stored = []
    for name, parameters in SCENARIOS:
        print(f"Scenario: {name}")
        handle = controller.start(parameters, metadata={"name": name})
        run_id = repository.save(handle.run)
        stored.append(repository.get(run_id))
        print_results(handle.run.results)
        print()

    controller.remove_progress_observer(show_progress)
    return stored


def run_optimization_demo(controller, baseline):
    """Optimize the baseline run for every target."""
    print("=" * 60)
    print(f"OPTIMIZATION (baseline: {baseline.label})")
    print("=" * 60)
    print()
    print(f"{'Target':<15} {'Improvement':>12} {'Confidence':>11}  Parameters")
    print("-" * 60)

    for result in controller.request_optimization_all(baseline):
        params = result.optimal_parameters
        print(
            f"{result.optimization_type.value:<15} "
            f"{result.improvement_percentage:>+11.1f}% "
            f"{result.confidence_score:>11.2f}  "
            f"R={params.roads:.0f} P={params.population:.0f} "
            f"H={params.housing:.0f} T={params.public_transport:.0f}"
        )
    print()


def run_comparison_demo(controller, baseline, others):
    """Compare the baseline against the other stored runs."""
    print("=" * 60)
    print("COMPARISON")
    print("=" * 60)
    print()

    comparison = controller.request_comparison(baseline, others)

    header = " ".join(f"{run.label[:14]:>15}" for run in others)
    print(f"{'Metric':<15} {'Baseline':>9} {header}")
    print("-" * 60)
    for metric, values in comparison.metrics.items():
        diffs = " ".join(f"{d:>+14.1f}%" for d in values.percentage_differences)
        print(f"{metric:<15} {values.baseline_value:>9.1f} {diffs}")
    print()

    print("Key findings:")
    for finding in comparison.summary.key_findings or ["No significant differences."]:
        print(f"  - {finding}")
    print()
    print("Recommendations:")
    for recommendation in comparison.summary.recommendations or ["None."]:
        print(f"  - {recommendation}")
    print()


def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)

    print()
    print("+" + "=" * 58 + "+")
    print("|          URBAN SCENARIO CORE DEMONSTRATION               |")
    print("+" + "=" * 58 + "+")
    print()

    repository = InMemoryRunRepository()
    with SimulationController(settings) as controller:
        runs = run_simulation_demo(controller, repository)
        baseline, others = runs[0], runs[1:]
        run_optimization_demo(controller, baseline)
        run_comparison_demo(controller, baseline, others)

    print("=" * 60)
    print("DEMONSTRATION COMPLETE")
    print("=" * 60)
    print()


if __name__ == "__main__":
    main()
