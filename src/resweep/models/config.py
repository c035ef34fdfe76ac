# Copyright (c) Syntropy Systems
"""Pydantic models for the run configuration file."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, NonNegativeFloat, NonNegativeInt, field_validator

from resweep.resume import ResumeMode
from resweep.schedule import parse_schedule_spec

from .base import JSONValue, ResweepBaseModel
from .schedule import Constant, ScheduleSpec


class ProblemSection(ResweepBaseModel):
    """Where the optimization problem comes from."""

    factory: str | None = Field(
        default=None,
        description="Import path 'package.module:callable' returning a problem.",
    )
    params: dict[str, JSONValue] = Field(default_factory=dict)


class SweepsSection(ResweepBaseModel):
    """Number of sweeps and the per-sweep budget specification."""

    nsweeps: NonNegativeInt = 12
    budget: ScheduleSpec = Field(default_factory=lambda: Constant(value=100))

    @field_validator("budget", mode="before")
    @classmethod
    def _parse_budget(cls, value: object) -> object:
        return parse_schedule_spec(value)


class ConvergenceSection(ResweepBaseModel):
    """Early-stopping tolerances. A tolerance of 0 disables that criterion."""

    objective_tol: NonNegativeFloat = 0.0
    error_tol: NonNegativeFloat = 0.0
    min_sweeps: int = 2
    patience: int = 1

    @field_validator("min_sweeps", "patience", mode="after")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        return max(1, value)


class CheckpointSection(ResweepBaseModel):
    """Checkpoint cadence and target."""

    every: NonNegativeInt = 0
    path: Path = Path("checkpoint.pkl")
    save_auxiliary: bool = False
    auxiliary_every: int = 1

    @field_validator("auxiliary_every", mode="after")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        return max(1, value)


class ResumeSection(ResweepBaseModel):
    """Whether and how to reuse an existing checkpoint."""

    enabled: bool = True
    mode: ResumeMode = ResumeMode.REMAINING
    require_fingerprint_match: bool = True


class IOSection(ResweepBaseModel):
    """Logging and history outputs."""

    log_path: Path | None = Path("run.log")
    console_log: bool = True
    console_level: str = "info"
    history_path: Path | None = None

    @field_validator("console_level", mode="after")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().lower()
        if level not in {"debug", "info", "warn", "warning", "error"}:
            msg = f"Unknown console_level: {value}"
            raise ValueError(msg)
        return level


class RunConfig(ResweepBaseModel):
    """Validated configuration for one optimization run."""

    problem: ProblemSection = Field(default_factory=ProblemSection)
    sweeps: SweepsSection = Field(default_factory=SweepsSection)
    convergence: ConvergenceSection = Field(default_factory=ConvergenceSection)
    checkpoint: CheckpointSection = Field(default_factory=CheckpointSection)
    resume: ResumeSection = Field(default_factory=ResumeSection)
    io: IOSection = Field(default_factory=IOSection)
