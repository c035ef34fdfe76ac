# Copyright (c) Syntropy Systems
"""Early-stopping state machine fed one result per completed sweep."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    """Lifecycle of a ConvergenceMonitor."""

    ACCUMULATING = "accumulating"
    STOPPED = "stopped"


@dataclass(frozen=True)
class SweepObservation:
    """One entry of the convergence record."""

    sweep: int
    objective: float
    local_error: float | None


@dataclass(frozen=True)
class StopSignal:
    """Details reported when the monitor decides to stop."""

    sweep: int
    delta_objective: float
    error: float
    streak: int


@dataclass
class ConvergenceMonitor:
    """Decide when successive sweeps have converged enough to stop.

    A sweep passes when the objective moved less than ``objective_tol``
    since the previous sweep and the worst local error of the sweep is
    below ``error_tol``. A tolerance of 0 disables that criterion; with
    both disabled the monitor never stops the run. ``patience``
    consecutive passing sweeps are needed, and no sweep before the
    ``max(2, min_sweeps)``-th observed one can pass.

    The monitor only advises: the caller decides what to do on a stop.
    """

    objective_tol: float = 0.0
    error_tol: float = 0.0
    min_sweeps: int = 2
    patience: int = 1

    objectives: list[float] = field(default_factory=list, init=False)
    errors: list[float | None] = field(default_factory=list, init=False)
    record: list[SweepObservation] = field(default_factory=list, init=False)
    streak: int = field(default=0, init=False)
    state: MonitorState = field(default=MonitorState.ACCUMULATING, init=False)
    stop: StopSignal | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.objective_tol < 0 or self.error_tol < 0:
            msg = "Convergence tolerances must be non-negative"
            raise ValueError(msg)
        self.min_sweeps = max(1, self.min_sweeps)
        self.patience = max(1, self.patience)

    @property
    def enabled(self) -> bool:
        """Return whether any stopping criterion is active."""
        return self.objective_tol > 0.0 or self.error_tol > 0.0

    @property
    def stopped(self) -> bool:
        """Return whether the monitor reached its terminal state."""
        return self.state is MonitorState.STOPPED

    def update(
        self,
        sweep: int,
        objective: float,
        local_error: float | None = None,
    ) -> bool:
        """Record a completed sweep and return True when the run should stop.

        Args:
            sweep: True sweep index, used for the record and logging
            objective: Objective value reached by the sweep
            local_error: Worst local truncation error of the sweep, if known

        """
        if self.stopped:
            msg = "ConvergenceMonitor already stopped; no further sweeps expected"
            raise RuntimeError(msg)

        self.objectives.append(float(objective))
        self.errors.append(None if local_error is None else float(local_error))
        self.record.append(SweepObservation(sweep, float(objective), local_error))

        if not self.enabled:
            return False

        # Warm-up counts sweeps observed by this monitor, not the sweep index:
        # monitor state is not checkpointed, so it restarts after a resume.
        if len(self.objectives) < max(2, self.min_sweeps):
            self.streak = 0
            return False

        delta = abs(self.objectives[-1] - self.objectives[-2])
        latest_error = self.errors[-1]
        error_now = math.inf if latest_error is None else latest_error

        objective_ok = self.objective_tol == 0.0 or delta < self.objective_tol
        error_ok = self.error_tol == 0.0 or error_now < self.error_tol

        if objective_ok and error_ok:
            self.streak += 1
        else:
            self.streak = 0

        if self.streak >= self.patience:
            self.state = MonitorState.STOPPED
            self.stop = StopSignal(
                sweep=sweep,
                delta_objective=delta,
                error=error_now,
                streak=self.streak,
            )
            logger.info(
                "Early stopping at sweep %d: dObj=%.3e, errNow=%.3e, streak=%d",
                sweep,
                delta,
                error_now,
                self.streak,
            )
            return True
        return False
