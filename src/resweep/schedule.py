# Copyright (c) Syntropy Systems
"""Expansion of budget specifications into per-sweep schedules."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from pydantic import TypeAdapter, ValidationError

from resweep.errors import ConfigurationError
from resweep.models.schedule import AutoRamp, Constant, FixedList, ScheduleSpec

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

_spec_adapter: TypeAdapter[ScheduleSpec] = TypeAdapter(ScheduleSpec)


def parse_schedule_spec(raw: object) -> ScheduleSpec:
    """Build a ScheduleSpec from its compact configuration form.

    Accepts:
    - a list of integers (FixedList)
    - a single integer (Constant)
    - a mapping with ``max``, ``min`` and optional ``ramp_length`` (AutoRamp)
    - a mapping with an explicit ``kind`` tag
    """
    if isinstance(raw, (FixedList, Constant, AutoRamp)):
        return raw

    data: object
    if isinstance(raw, (list, tuple)):
        data = {"kind": "fixed", "values": list(raw)}
    elif isinstance(raw, int) and not isinstance(raw, bool):
        data = {"kind": "constant", "value": raw}
    elif isinstance(raw, dict):
        mapping = cast("dict[str, object]", raw)
        data = mapping if "kind" in mapping else {"kind": "auto", **mapping}
    else:
        msg = f"Unsupported budget specification: {raw!r}"
        raise ConfigurationError(msg)

    try:
        return _spec_adapter.validate_python(data)
    except ValidationError as e:
        msg = f"Invalid budget specification {raw!r}: {e}"
        raise ConfigurationError(msg) from e


def _pad_with_last(ramp: Sequence[int], nsweeps: int) -> list[int]:
    """Truncate or extend ``ramp`` to ``nsweeps`` entries, repeating the tail."""
    if not ramp:
        msg = "Budget list must not be empty"
        raise ConfigurationError(msg)
    if len(ramp) >= nsweeps:
        return list(ramp[:nsweeps])
    return list(ramp) + [ramp[-1]] * (nsweeps - len(ramp))


def geometric_ramp(low: int, high: int, npoints: int) -> list[int]:
    """Geometric interpolation from ``low`` to ``high`` over ``npoints``.

    Points are rounded and non-decreasing, never exceed ``high`` and the
    last point is exactly ``high``.
    """
    if npoints <= 1:
        return [high]
    ratio = (high / low) ** (1.0 / (npoints - 1))
    points: list[int] = []
    for i in range(npoints):
        value = min(round(low * ratio**i), high)
        if points:
            value = max(value, points[-1])
        points.append(value)
    points[-1] = high
    return points


def doubling_ramp(low: int, high: int) -> list[int]:
    """Double from ``low`` until ``high`` is reached, capping at ``high``."""
    points: list[int] = []
    current = low
    while current < high:
        points.append(current)
        current = min(current * 2, high)
    points.append(high)
    return points


def expand(spec: ScheduleSpec, nsweeps: int) -> list[int]:
    """Expand a budget specification into exactly ``nsweeps`` budgets."""
    if nsweeps < 0:
        msg = f"nsweeps must be non-negative, got {nsweeps}"
        raise ConfigurationError(msg)
    if nsweeps == 0:
        return []

    if isinstance(spec, FixedList):
        return _pad_with_last(spec.values, nsweeps)
    if isinstance(spec, Constant):
        return _pad_with_last([spec.value], nsweeps)
    if isinstance(spec, AutoRamp):
        if spec.min > spec.max:
            msg = f"ramp min ({spec.min}) must not exceed max ({spec.max})"
            raise ConfigurationError(msg)
        if spec.ramp_length is not None:
            ramp = geometric_ramp(spec.min, spec.max, min(spec.ramp_length, nsweeps))
        else:
            ramp = doubling_ramp(spec.min, spec.max)
        return _pad_with_last(ramp, nsweeps)

    msg = f"Unknown schedule specification: {spec!r}"
    raise ConfigurationError(msg)


def build_schedule(spec: ScheduleSpec, nsweeps: int) -> list[int]:
    """Expand ``spec`` and log the resulting schedule."""
    schedule = expand(spec, nsweeps)
    logger.info(
        "Built %s schedule with %d sweeps: %s",
        spec.kind,
        len(schedule),
        schedule,
    )
    return schedule
