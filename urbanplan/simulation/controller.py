"""
Simulation Controller

Orchestrates one session of the scenario dashboard:
- Runs a simulation with staged progress reporting
- Tracks the Idle -> Running -> {Completed, Cancelled} state machine
- Forwards optimization and comparison requests to the engines

Finished runs are handed back without an id; persisting them through a
RunRepository is the caller's job.
"""

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union
from uuid import UUID, uuid4
import logging
import threading
import time

from ..comparison.engine import ComparisonEngine
from ..config.settings import Settings, get_settings
from ..core.exceptions import AlreadyRunning, InvalidStateTransition
from ..core.schemas import (
    ComparisonMetric,
    OptimizationResult,
    OptimizationTarget,
    Parameters,
    SimulationRun
)
from ..optimization.engine import OptimizationEngine
from ..scoring.model import ParametersLike, ScoringModel

logger = logging.getLogger(__name__)


class SimulationState(Enum):
    """Lifecycle of a simulation."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class RunHandle:
    """
    Caller-side handle on one simulation.

    ``run`` is set only once the simulation completes; a cancelled handle
    never carries a run.
    """
    parameters: Parameters
    id: UUID = field(default_factory=uuid4)
    state: SimulationState = SimulationState.RUNNING
    progress: float = 0.0
    run: Optional[SimulationRun] = None
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    future: Optional[Future] = None

    @property
    def is_running(self) -> bool:
        return self.state is SimulationState.RUNNING


ProgressObserver = Callable[[RunHandle, float], None]


class SimulationController:
    """
    One controller per session.

    At most one simulation runs at a time. Optimization and comparison
    requests are serialized so one completes before the next begins.
    """

    def __init__(
        self,
        settings: Settings = None,
        scoring_model: ScoringModel = None,
        optimization_engine: OptimizationEngine = None,
        comparison_engine: ComparisonEngine = None,
        executor: Executor = None
    ):
        self.settings = settings or get_settings()
        self.scoring_model = scoring_model or ScoringModel()
        self.optimization_engine = optimization_engine or OptimizationEngine(
            self.settings.optimizer, self.scoring_model
        )
        self.comparison_engine = comparison_engine or ComparisonEngine(self.settings.comparison)

        self._state = SimulationState.IDLE
        self._active: Optional[RunHandle] = None
        self._observers: list[ProgressObserver] = []

        self._state_lock = threading.Lock()
        self._request_lock = threading.Lock()
        self._stop_optimization = threading.Event()

        self._executor = executor
        self._owns_executor = executor is None

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def active_handle(self) -> Optional[RunHandle]:
        return self._active

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def add_progress_observer(self, observer: ProgressObserver) -> None:
        self._observers.append(observer)

    def remove_progress_observer(self, observer: ProgressObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # -------------------------------------------------------------------------
    # Simulation lifecycle
    # -------------------------------------------------------------------------

    def start(
        self,
        parameters: ParametersLike,
        metadata: Optional[dict[str, Any]] = None
    ) -> RunHandle:
        """
        Run a simulation to completion (or cancellation).

        Raises InvalidParameters before any state change, and
        AlreadyRunning while another simulation is in flight.
        """
        handle = self._begin(parameters)
        return self._execute(handle, metadata)

    def start_async(
        self,
        parameters: ParametersLike,
        metadata: Optional[dict[str, Any]] = None
    ) -> RunHandle:
        """
        Claim the running slot now and simulate on the executor.

        The returned handle can be cancelled right away; ``handle.future``
        resolves to the same handle once it is Completed or Cancelled.
        """
        handle = self._begin(parameters)
        try:
            handle.future = self._get_executor().submit(self._execute, handle, metadata)
        except Exception:
            self._abandon(handle)
            raise
        return handle

    def cancel(self, handle: RunHandle) -> None:
        """Cancel a running simulation; its run is discarded."""
        with self._state_lock:
            if not handle.is_running or self._active is not handle:
                raise InvalidStateTransition(
                    f"Cannot cancel simulation {handle.id} in state {handle.state.value}"
                )
            handle.state = SimulationState.CANCELLED
            handle.finished_at = datetime.now()
            self._state = SimulationState.CANCELLED

        logger.info("Simulation %s cancelled at %.0f%%", handle.id, handle.progress)

    def _begin(self, parameters: ParametersLike) -> RunHandle:
        validated = Parameters.from_mapping(parameters)
        with self._state_lock:
            if self._state is SimulationState.RUNNING:
                raise AlreadyRunning(
                    f"Simulation {self._active.id} is still running"
                )
            handle = RunHandle(parameters=validated)
            self._active = handle
            self._state = SimulationState.RUNNING

        logger.info("Simulation %s started", handle.id)
        return handle

    def _execute(self, handle: RunHandle, metadata: Optional[dict[str, Any]]) -> RunHandle:
        started = time.perf_counter()
        stages = self.settings.simulation.progress_stages
        try:
            self._report(handle, 0.0)
            results = None
            for stage in range(1, stages + 1):
                # Cooperative: a stage that started always finishes
                if not handle.is_running:
                    return handle
                if results is None:
                    results = self.scoring_model.score(handle.parameters)
                self._report(handle, stage / stages * 100)

            run_metadata = dict(metadata or {})
            run_metadata.setdefault("duration_ms", (time.perf_counter() - started) * 1000)
            run = SimulationRun(
                parameters=handle.parameters,
                results=results,
                metadata=run_metadata
            )
        except Exception:
            logger.exception("Simulation %s failed", handle.id)
            self._abandon(handle)
            raise

        with self._state_lock:
            if not handle.is_running:
                return handle
            handle.run = run
            handle.state = SimulationState.COMPLETED
            handle.finished_at = datetime.now()
            if self._active is handle:
                self._state = SimulationState.COMPLETED

        logger.info(
            "Simulation %s completed: congestion=%.1f satisfaction=%.1f "
            "emissions=%.1f transit_usage=%.1f",
            handle.id, results.congestion, results.satisfaction,
            results.emissions, results.transit_usage
        )
        return handle

    def _abandon(self, handle: RunHandle) -> None:
        with self._state_lock:
            if handle.is_running:
                handle.state = SimulationState.CANCELLED
                handle.finished_at = datetime.now()
            if self._active is handle:
                self._state = SimulationState.IDLE
                self._active = None

    def _report(self, handle: RunHandle, progress: float) -> None:
        progress = max(handle.progress, min(100.0, progress))
        handle.progress = progress
        for observer in list(self._observers):
            observer(handle, progress)

    # -------------------------------------------------------------------------
    # Optimization and comparison
    # -------------------------------------------------------------------------

    def request_optimization(
        self,
        baseline: SimulationRun,
        target: Union[OptimizationTarget, str]
    ) -> OptimizationResult:
        with self._request_lock:
            self._stop_optimization.clear()
            return self.optimization_engine.optimize(
                baseline, target, should_stop=self._stop_optimization.is_set
            )

    def request_optimization_all(self, baseline: SimulationRun) -> list[OptimizationResult]:
        with self._request_lock:
            self._stop_optimization.clear()
            return self.optimization_engine.optimize_all(
                baseline, should_stop=self._stop_optimization.is_set
            )

    def cancel_optimization(self) -> None:
        """
        Stop the current search before its next round.

        Each request clears the flag when it starts, so a cancel issued
        while no search holds the request lock is discarded. That includes
        a queued ``request_optimization_async`` that has not started yet;
        cancel its future instead.
        """
        self._stop_optimization.set()

    def request_comparison(
        self,
        baseline: SimulationRun,
        others: Sequence[SimulationRun]
    ) -> ComparisonMetric:
        with self._request_lock:
            return self.comparison_engine.compare(baseline, others)

    def request_optimization_async(
        self,
        baseline: SimulationRun,
        target: Union[OptimizationTarget, str]
    ) -> Future:
        return self._get_executor().submit(self.request_optimization, baseline, target)

    def request_comparison_async(
        self,
        baseline: SimulationRun,
        others: Sequence[SimulationRun]
    ) -> Future:
        return self._get_executor().submit(self.request_comparison, baseline, list(others))

    # -------------------------------------------------------------------------
    # Executor
    # -------------------------------------------------------------------------

    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.settings.simulation.max_workers,
                thread_name_prefix="urbanplan"
            )
        return self._executor

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def __enter__(self) -> "SimulationController":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
