# Copyright (c) Syntropy Systems
"""Pydantic models for checkpoint metadata."""

from __future__ import annotations

from pydantic import Field, NonNegativeInt

from .base import FrozenModel, ResweepBaseModel

CHECKPOINT_FORMAT_VERSION = 1


class SiteDescriptor(FrozenModel):
    """Structural descriptor of one site of an optimization state."""

    dim: int = Field(ge=1)
    conserved: bool = False


class CheckpointMeta(ResweepBaseModel):
    """Provenance stored next to the serialized state."""

    format_version: int = CHECKPOINT_FORMAT_VERSION
    objective: float
    sweep: NonNegativeInt
    fingerprint: str | None = None
    structure: list[SiteDescriptor] = Field(default_factory=list)
    config_text: str | None = None
    created_at: str
    run_by: str | None = None
    has_auxiliary: bool = False
