# Copyright (c) Syntropy Systems
"""Decide whether and how a run picks up from a prior checkpoint."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

from typing_extensions import TypeAlias

from resweep.checkpoint import CheckpointReadError, CheckpointRecord, CheckpointStore
from resweep.state import structures_match

if TYPE_CHECKING:
    from collections.abc import Sequence

    from resweep.models.checkpoint import SiteDescriptor

logger = logging.getLogger(__name__)


class ResumeMode(str, Enum):
    """How a compatible checkpoint is reused."""

    REMAINING = "remaining"
    WARM_START = "warm_start"


@dataclass(frozen=True)
class FreshStart:
    """Ignore any checkpoint and start from a new initial state.

    ``discarded`` is set when a checkpoint existed but was rejected.
    """

    reason: str
    discarded: bool = False


@dataclass(frozen=True)
class ResumeRemaining:
    """Continue with the schedule entries after ``from_sweep``."""

    from_sweep: int
    reason: str = "checkpoint compatible"


@dataclass(frozen=True)
class WarmStart:
    """Rerun the full schedule starting from the checkpointed state."""

    reason: str = "checkpoint compatible"


ResumeDecision: TypeAlias = Union[FreshStart, ResumeRemaining, WarmStart]


class ResumeController:
    """Validates a stored checkpoint against the current run request."""

    store: CheckpointStore
    requested_structure: tuple[SiteDescriptor, ...]
    mode: ResumeMode
    allow_resume: bool
    require_fingerprint_match: bool

    def __init__(
        self,
        store: CheckpointStore,
        requested_structure: Sequence[SiteDescriptor],
        *,
        mode: ResumeMode | str = ResumeMode.REMAINING,
        allow_resume: bool = True,
        require_fingerprint_match: bool = True,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Checkpoint store for the run target
            requested_structure: Site structure the current run expects
            mode: Reuse policy for a compatible checkpoint
            allow_resume: When False every decision is a fresh start
            require_fingerprint_match: Discard checkpoints whose stored
                fingerprint is absent or differs from the current one

        """
        self.store = store
        self.requested_structure = tuple(requested_structure)
        self.mode = ResumeMode(mode)
        self.allow_resume = allow_resume
        self.require_fingerprint_match = require_fingerprint_match

    def decide(
        self,
        current_fingerprint: str | None,
    ) -> tuple[ResumeDecision, CheckpointRecord | None]:
        """Return the resume decision and the loaded checkpoint, if used."""
        decision, record = self._decide(current_fingerprint)
        if isinstance(decision, FreshStart):
            if decision.discarded:
                logger.warning(
                    "Discarding checkpoint, fresh start: %s", decision.reason
                )
            else:
                logger.info("Fresh start: %s", decision.reason)
        elif isinstance(decision, ResumeRemaining):
            logger.info(
                "Resuming remaining schedule after sweep %d from %s",
                decision.from_sweep,
                self.store.path,
            )
        else:
            logger.info("Warm start from %s with the full schedule", self.store.path)
        return decision, record

    def _decide(
        self,
        current_fingerprint: str | None,
    ) -> tuple[ResumeDecision, CheckpointRecord | None]:
        if not self.allow_resume:
            return FreshStart("resume disabled"), None

        loaded = self.store.read()
        if loaded is CheckpointReadError.NOT_FOUND:
            return FreshStart(f"no checkpoint at {self.store.path}"), None
        if isinstance(loaded, CheckpointReadError):
            reason = f"checkpoint {self.store.path} is unreadable"
            return FreshStart(reason, discarded=True), None

        if self.require_fingerprint_match:
            if current_fingerprint is None:
                reason = "no fingerprint available for the current run"
                return FreshStart(reason, discarded=True), None
            if loaded.fingerprint is None:
                reason = "checkpoint has no stored fingerprint"
                return FreshStart(reason, discarded=True), None
            if loaded.fingerprint != current_fingerprint:
                reason = "checkpoint fingerprint does not match configuration"
                return FreshStart(reason, discarded=True), None

        if not structures_match(loaded.state.structure, self.requested_structure):
            reason = "checkpoint structure is incompatible"
            return FreshStart(reason, discarded=True), None

        if self.mode is ResumeMode.WARM_START:
            return WarmStart(), loaded
        return ResumeRemaining(from_sweep=loaded.sweep), loaded
