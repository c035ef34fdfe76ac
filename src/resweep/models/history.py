# Copyright (c) Syntropy Systems
"""Pydantic models for the per-sweep history log."""

from __future__ import annotations

from pydantic import Field

from .base import ExtraAllowModel


class SweepRecord(ExtraAllowModel):
    """One line of history.jsonl."""

    timestamp: str | None = Field(default=None, alias="_timestamp")
    sweep: int
    budget: int
    objective: float
    local_error: float | None = None
    streak: int = 0
