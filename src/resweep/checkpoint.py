# Copyright (c) Syntropy Systems
"""Atomic, best-effort checkpoint persistence."""
from __future__ import annotations

import contextlib
import logging
import os
import pickle
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError

from resweep.models.checkpoint import CheckpointMeta
from resweep.state import OptimizationState

if TYPE_CHECKING:
    from resweep.models.base import JSONValue
    from resweep.state import AuxiliaryFn

logger = logging.getLogger(__name__)


def utcnow() -> str:
    """Get current UTC time as ISO format string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _run_by() -> str:
    return os.environ.get("USER") or os.environ.get("USERNAME") or "unknown"


class CheckpointReadError(str, Enum):
    """Sentinel returned when no usable checkpoint could be read."""

    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class CheckpointRecord:
    """A loaded checkpoint: state, objective, sweep and provenance."""

    state: OptimizationState
    objective: float
    sweep: int
    fingerprint: str | None
    auxiliary: JSONValue | None
    meta: CheckpointMeta


@dataclass(frozen=True)
class AuxiliaryPolicy:
    """How often the expensive auxiliary measurement is attached.

    It is attached on every ``every``-th triggered checkpoint, counting
    triggers as ``sweep // cadence``.
    """

    measure: AuxiliaryFn | None = None
    every: int = 1

    def applies(self, trigger_index: int) -> bool:
        """Return whether the trigger with this index carries the snapshot."""
        if self.measure is None:
            return False
        return trigger_index % max(1, self.every) == 0


class CheckpointStore:
    """Single checkpoint file per run target, superseded on each write.

    Writes go to ``<path>.tmp`` in the same directory and are moved onto
    ``path`` with ``os.replace``, so an interrupted write leaves the
    previous checkpoint intact.
    """

    path: Path
    tmp_path: Path
    writes: int

    def __init__(self, path: Path | str) -> None:
        """Initialize a store for one checkpoint target."""
        self.path = Path(path)
        self.tmp_path = self.path.with_name(self.path.name + ".tmp")
        self.writes = 0

    def exists(self) -> bool:
        """Return whether a checkpoint file is present."""
        return self.path.is_file()

    def maybe_write(  # noqa: PLR0913
        self,
        cadence: int,
        sweep: int,
        state: OptimizationState,
        objective: float,
        fingerprint: str | None = None,
        auxiliary: AuxiliaryPolicy | None = None,
        config_text: str | None = None,
    ) -> bool:
        """Write a checkpoint if ``sweep`` falls on the cadence.

        Returns True only when a checkpoint was durably written. Write
        failures are logged and swallowed so the run can continue.
        """
        if cadence <= 0 or sweep % cadence != 0:
            return False

        trigger_index = sweep // cadence
        policy = auxiliary or AuxiliaryPolicy()
        try:
            snapshot = None
            if policy.measure is not None and policy.applies(trigger_index):
                snapshot = policy.measure(state)
            self.write(
                state,
                objective=objective,
                sweep=sweep,
                fingerprint=fingerprint,
                auxiliary=snapshot,
                config_text=config_text,
            )
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Failed to write checkpoint at sweep %d to %s: %s",
                sweep,
                self.path,
                e,
            )
            self._discard_tmp()
            return False

        logger.info(
            "Wrote checkpoint at sweep %d to %s (auxiliary_saved=%s)",
            sweep,
            self.path,
            snapshot is not None,
        )
        return True

    def write(  # noqa: PLR0913
        self,
        state: OptimizationState,
        *,
        objective: float,
        sweep: int,
        fingerprint: str | None = None,
        auxiliary: JSONValue | None = None,
        config_text: str | None = None,
    ) -> None:
        """Serialize a checkpoint and atomically replace the target.

        Raises on failure; the temporary file may be left behind.
        """
        meta = CheckpointMeta(
            objective=float(objective),
            sweep=sweep,
            fingerprint=fingerprint,
            structure=list(state.structure),
            config_text=config_text,
            created_at=utcnow(),
            run_by=_run_by(),
            has_auxiliary=auxiliary is not None,
        )
        payload = {
            "meta": meta.model_dump(mode="json"),
            "state": state.payload,
            "auxiliary": auxiliary,
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.tmp_path.open("wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(self.tmp_path, self.path)
        self.writes += 1

    def read(self) -> CheckpointRecord | CheckpointReadError:
        """Load the checkpoint, or return a sentinel if it is unusable."""
        if not self.exists():
            return CheckpointReadError.NOT_FOUND

        try:
            with self.path.open("rb") as f:
                raw = pickle.load(f)  # noqa: S301
            data = cast("dict[str, object]", raw)
            meta = CheckpointMeta.model_validate(data["meta"])
            state = OptimizationState(
                payload=data["state"],
                structure=tuple(meta.structure),
            )
        except (OSError, EOFError, pickle.UnpicklingError, ValidationError) as e:
            logger.warning("Checkpoint %s is unreadable: %s", self.path, e)
            return CheckpointReadError.CORRUPT
        # A damaged pickle stream can raise nearly anything while loading.
        except Exception as e:  # noqa: BLE001
            logger.warning("Checkpoint %s is malformed: %s", self.path, e)
            return CheckpointReadError.CORRUPT

        return CheckpointRecord(
            state=state,
            objective=meta.objective,
            sweep=meta.sweep,
            fingerprint=meta.fingerprint,
            auxiliary=cast("JSONValue | None", data.get("auxiliary")),
            meta=meta,
        )

    def _discard_tmp(self) -> None:
        with contextlib.suppress(OSError):
            self.tmp_path.unlink(missing_ok=True)


def read_checkpoint(path: Path | str) -> CheckpointRecord | CheckpointReadError:
    """Read the checkpoint at ``path``."""
    return CheckpointStore(path).read()
