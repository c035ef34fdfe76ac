# Copyright (c) Syntropy Systems
"""The checkpointed, early-stopping sweep loop."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from resweep.checkpoint import AuxiliaryPolicy, CheckpointStore
from resweep.convergence import ConvergenceMonitor
from resweep.history import SweepHistory
from resweep.resume import (
    FreshStart,
    ResumeController,
    ResumeDecision,
    WarmStart,
)
from resweep.schedule import build_schedule
from resweep.state import OptimizationState, StepResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from resweep.models.checkpoint import SiteDescriptor
    from resweep.models.config import RunConfig
    from resweep.state import AuxiliaryFn, StepFn

logger = logging.getLogger(__name__)


class DriverStatus(str, Enum):
    """Lifecycle of a Driver run."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class DriverResult:
    """Final outcome of a run."""

    objective: float | None
    state: OptimizationState
    status: DriverStatus
    sweeps_run: int
    last_sweep: int
    decision: ResumeDecision


class Driver:
    """Runs sweeps in sequence until convergence or schedule exhaustion.

    Each sweep calls the external ``step`` with the current state and
    the sweep's budget, feeds the result to a ConvergenceMonitor and
    offers it to the CheckpointStore. Step errors propagate unchanged.
    """

    config: RunConfig
    step: StepFn
    initial_state: Callable[[], OptimizationState]
    fingerprint: str | None
    config_text: str | None
    store: CheckpointStore
    history: SweepHistory | None
    status: DriverStatus
    _structure: tuple[SiteDescriptor, ...] | None
    _auxiliary: AuxiliaryPolicy
    _fresh_state: OptimizationState | None

    def __init__(  # noqa: PLR0913
        self,
        config: RunConfig,
        step: StepFn,
        initial_state: Callable[[], OptimizationState],
        *,
        structure: Sequence[SiteDescriptor] | None = None,
        fingerprint: str | None = None,
        config_text: str | None = None,
        auxiliary: AuxiliaryFn | None = None,
    ) -> None:
        """Initialize a driver.

        Args:
            config: Validated run configuration
            step: External optimizer, called once per sweep
            initial_state: Factory for a fresh starting state
            structure: Site structure of the requested run; taken from a
                fresh initial state when omitted
            fingerprint: Configuration fingerprint stamped on checkpoints
                and required to resume
            config_text: Configuration text stored with checkpoints
            auxiliary: Optional expensive measurement attached to some
                checkpoints

        """
        self.config = config
        self.step = step
        self.initial_state = initial_state
        self.fingerprint = fingerprint
        self.config_text = config_text
        self.store = CheckpointStore(config.checkpoint.path)
        history_path = config.io.history_path
        self.history = SweepHistory(history_path) if history_path else None
        self.status = DriverStatus.INITIALIZING
        self._structure = tuple(structure) if structure is not None else None
        measure = auxiliary if config.checkpoint.save_auxiliary else None
        self._auxiliary = AuxiliaryPolicy(
            measure=measure,
            every=config.checkpoint.auxiliary_every,
        )
        self._fresh_state = None

    def _new_state(self) -> OptimizationState:
        if self._fresh_state is None:
            self._fresh_state = self.initial_state()
        state = self._fresh_state
        self._fresh_state = None
        return state

    def requested_structure(self) -> tuple[SiteDescriptor, ...]:
        """Return the site structure checkpoints must match."""
        if self._structure is None:
            self._fresh_state = self.initial_state()
            self._structure = tuple(self._fresh_state.structure)
        return self._structure

    def run(self) -> DriverResult:
        """Execute the run and return the final objective and state."""
        sweeps = self.config.sweeps
        schedule = build_schedule(sweeps.budget, sweeps.nsweeps)

        resume = self.config.resume
        controller = ResumeController(
            self.store,
            self.requested_structure(),
            mode=resume.mode,
            allow_resume=resume.enabled,
            require_fingerprint_match=resume.require_fingerprint_match,
        )
        decision, record = controller.decide(self.fingerprint)

        offset = 0
        objective: float | None = None
        if isinstance(decision, FreshStart) or record is None:
            state = self._new_state()
        elif isinstance(decision, WarmStart):
            state = record.state
        else:
            state = record.state
            offset = decision.from_sweep
            objective = record.objective
            schedule = schedule[offset:]
            if not schedule:
                logger.info(
                    "Checkpoint at sweep %d already covers %d requested sweeps; "
                    "reporting stored objective %.12g",
                    offset,
                    sweeps.nsweeps,
                    record.objective,
                )
                self.status = DriverStatus.CONVERGED
                return DriverResult(
                    objective=record.objective,
                    state=state,
                    status=self.status,
                    sweeps_run=0,
                    last_sweep=offset,
                    decision=decision,
                )

        return self._loop(schedule, state, offset, objective, decision)

    def _record_history(
        self,
        sweep: int,
        budget: int,
        objective: float,
        local_error: float | None,
        streak: int,
    ) -> None:
        if self.history is None:
            return
        try:
            _ = self.history.append(
                sweep,
                budget,
                objective,
                local_error=local_error,
                streak=streak,
            )
        except OSError as e:
            logger.warning(
                "Failed to record sweep %d in %s: %s", sweep, self.history.path, e
            )

    def _loop(
        self,
        schedule: list[int],
        state: OptimizationState,
        offset: int,
        objective: float | None,
        decision: ResumeDecision,
    ) -> DriverResult:
        conv = self.config.convergence
        monitor = ConvergenceMonitor(
            objective_tol=conv.objective_tol,
            error_tol=conv.error_tol,
            min_sweeps=conv.min_sweeps,
            patience=conv.patience,
        )
        cadence = self.config.checkpoint.every
        self.status = DriverStatus.RUNNING
        sweeps_run = 0
        sweep = offset

        for local_index, budget in enumerate(schedule, start=1):
            sweep = local_index + offset
            result = StepResult(*self.step(state, budget))
            state = result.state
            objective = float(result.objective)
            sweeps_run += 1
            logger.debug(
                "Sweep %d: budget=%d objective=%.12g local_error=%s",
                sweep,
                budget,
                objective,
                result.local_error,
            )

            stop = monitor.update(sweep, objective, result.local_error)
            self._record_history(
                sweep, budget, objective, result.local_error, monitor.streak
            )
            _ = self.store.maybe_write(
                cadence,
                sweep,
                state,
                objective,
                fingerprint=self.fingerprint,
                auxiliary=self._auxiliary,
                config_text=self.config_text,
            )
            if stop:
                self.status = DriverStatus.CONVERGED
                break
        else:
            self.status = DriverStatus.EXHAUSTED

        logger.info(
            "Run %s after %d sweeps (last sweep %d, objective %s)",
            self.status.value,
            sweeps_run,
            sweep,
            "n/a" if objective is None else f"{objective:.12g}",
        )
        return DriverResult(
            objective=objective,
            state=state,
            status=self.status,
            sweeps_run=sweeps_run,
            last_sweep=sweep,
            decision=decision,
        )


def run_optimization(  # noqa: PLR0913
    config: RunConfig,
    step: StepFn,
    initial_state: Callable[[], OptimizationState],
    *,
    structure: Sequence[SiteDescriptor] | None = None,
    fingerprint: str | None = None,
    config_text: str | None = None,
    auxiliary: AuxiliaryFn | None = None,
) -> DriverResult:
    """Build a Driver and run it to completion."""
    driver = Driver(
        config,
        step,
        initial_state,
        structure=structure,
        fingerprint=fingerprint,
        config_text=config_text,
        auxiliary=auxiliary,
    )
    return driver.run()
