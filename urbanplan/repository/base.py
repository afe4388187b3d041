"""
Run Repository

The record store is owned by the hosting application. The core only
depends on this contract: ``save`` assigns an id and ``list`` returns
stored runs, newest first.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4
import logging

from ..core.schemas import SimulationRun

logger = logging.getLogger(__name__)


@dataclass
class RunFilter:
    """Selection criteria for listing runs."""
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    limit: Optional[int] = None

    def matches(self, run: SimulationRun) -> bool:
        if self.created_after and run.created_at <= self.created_after:
            return False
        if self.created_before and run.created_at >= self.created_before:
            return False
        return all(run.metadata.get(key) == value for key, value in self.metadata.items())


class RunRepository(ABC):
    """Append/read store for simulation runs."""

    @abstractmethod
    def save(self, run: SimulationRun) -> str:
        """Persist a run and return its id."""
        pass

    @abstractmethod
    def get(self, run_id: str) -> Optional[SimulationRun]:
        """Fetch one run by id."""
        pass

    @abstractmethod
    def list(self, run_filter: Optional[RunFilter] = None) -> list[SimulationRun]:
        """List runs matching the filter, newest first."""
        pass


class InMemoryRunRepository(RunRepository):
    """
    Dictionary-backed repository.

    Suitable for tests and the demo script; stored runs carry their
    assigned id.
    """

    def __init__(self):
        self._runs: dict[str, SimulationRun] = {}

    def save(self, run: SimulationRun) -> str:
        run_id = run.id or str(uuid4())
        self._runs[run_id] = run.with_id(run_id)
        logger.debug("Saved run %s", run_id)
        return run_id

    def get(self, run_id: str) -> Optional[SimulationRun]:
        return self._runs.get(run_id)

    def list(self, run_filter: Optional[RunFilter] = None) -> list[SimulationRun]:
        run_filter = run_filter or RunFilter()
        runs = [run for run in self._runs.values() if run_filter.matches(run)]
        runs.sort(key=lambda run: run.created_at, reverse=True)
        if run_filter.limit is not None:
            runs = runs[:run_filter.limit]
        return runs

    def __len__(self) -> int:
        return len(self._runs)
