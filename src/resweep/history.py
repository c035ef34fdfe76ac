# Copyright (c) Syntropy Systems
"""Append-only per-sweep history for resweep runs."""
from __future__ import annotations

from contextlib import suppress
from typing import TYPE_CHECKING

from pydantic import ValidationError

from resweep.checkpoint import utcnow
from resweep.models.history import SweepRecord

if TYPE_CHECKING:
    from pathlib import Path


class SweepHistory:
    """Writes one JSON line per completed sweep.

    Each line is flushed as soon as it is written so that a killed
    process leaves at most a partial final line behind.
    """

    path: Path

    def __init__(self, path: Path) -> None:
        """Initialize a history file, creating its parent directory."""
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(
        self,
        sweep: int,
        budget: int,
        objective: float,
        local_error: float | None = None,
        streak: int = 0,
    ) -> SweepRecord:
        """Append a record for a completed sweep and return it."""
        record = SweepRecord(
            _timestamp=utcnow(),
            sweep=sweep,
            budget=budget,
            objective=objective,
            local_error=local_error,
            streak=streak,
        )
        with self.path.open("a") as f:
            _ = f.write(record.model_dump_json(by_alias=True) + "\n")
            _ = f.flush()
        return record


def read_history(path: Path) -> list[SweepRecord]:
    """Read sweep records from a JSONL file, tolerating partial final lines."""
    records: list[SweepRecord] = []

    if not path.exists():
        return records

    with path.open() as f:
        for raw_line in f:
            line = raw_line.strip()
            if line:
                with suppress(ValidationError):
                    records.append(SweepRecord.model_validate_json(line))

    return records
