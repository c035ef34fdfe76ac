# Copyright (c) Syntropy Systems
"""Pydantic models for per-sweep budget specifications."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field, PositiveInt, model_validator
from typing_extensions import Self, TypeAlias

from .base import FrozenModel


class FixedList(FrozenModel):
    """Explicit budget per sweep, padded with its last value."""

    kind: Literal["fixed"] = "fixed"
    values: tuple[PositiveInt, ...] = Field(min_length=1)


class Constant(FrozenModel):
    """The same budget for every sweep."""

    kind: Literal["constant"] = "constant"
    value: PositiveInt


class AutoRamp(FrozenModel):
    """Ramp from ``min`` up to ``max``, then plateau.

    With ``ramp_length`` the ramp is geometric over that many points,
    otherwise the budget doubles each sweep until it reaches ``max``.
    """

    kind: Literal["auto"] = "auto"
    max: PositiveInt
    min: PositiveInt
    ramp_length: PositiveInt | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if self.min > self.max:
            msg = f"ramp min ({self.min}) must not exceed max ({self.max})"
            raise ValueError(msg)
        return self


ScheduleSpec: TypeAlias = Annotated[
    Union[FixedList, Constant, AutoRamp],
    Field(discriminator="kind"),
]
