"""Shared fixtures for the scenario core tests."""

from datetime import datetime, timedelta

import pytest

from urbanplan.config import ComparisonConfig, OptimizerConfig, Settings, SimulationConfig
from urbanplan.core import Parameters, SimulationRun
from urbanplan.scoring import score


MIDPOINT = {"roads": 50, "population": 50, "housing": 50, "public_transport": 50}


def build_run(parameters=None, run_id=None, created_at=None, results=None, **metadata):
    params = Parameters(**(parameters or MIDPOINT))
    return SimulationRun(
        id=run_id,
        created_at=created_at or datetime(2026, 1, 1, 12, 0, 0),
        parameters=params,
        results=results or score(params),
        metadata=metadata
    )


@pytest.fixture
def make_run():
    return build_run


@pytest.fixture
def baseline_run():
    return build_run(run_id="baseline", name="Baseline")


@pytest.fixture
def later():
    base = datetime(2026, 1, 1, 12, 0, 0)
    return lambda minutes: base + timedelta(minutes=minutes)


@pytest.fixture
def settings():
    return Settings(
        optimizer=OptimizerConfig(),
        comparison=ComparisonConfig(),
        simulation=SimulationConfig()
    )
