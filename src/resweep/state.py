# Copyright (c) Syntropy Systems
"""Optimization state handle and the step collaborator interface."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, NamedTuple, Protocol, Union

from typing_extensions import TypeAlias

from resweep.models.base import JSONValue
from resweep.models.checkpoint import SiteDescriptor

if TYPE_CHECKING:
    from collections.abc import Sequence

StateDescriptor: TypeAlias = tuple[SiteDescriptor, ...]


@dataclass(frozen=True)
class OptimizationState:
    """Opaque candidate solution plus its structural descriptor.

    ``payload`` is whatever the step collaborator works on and must be
    picklable for checkpointing. ``structure`` describes each site's
    dimension and conserved-quantity flag.
    """

    payload: object
    structure: StateDescriptor

    @classmethod
    def create(
        cls,
        payload: object,
        structure: Sequence[SiteDescriptor | tuple[int, bool]],
    ) -> OptimizationState:
        """Build a state, accepting ``(dim, conserved)`` pairs for sites."""
        sites = tuple(
            site
            if isinstance(site, SiteDescriptor)
            else SiteDescriptor(dim=site[0], conserved=site[1])
            for site in structure
        )
        return cls(payload=payload, structure=sites)


class StepResult(NamedTuple):
    """Outcome of one sweep of the external optimizer."""

    state: OptimizationState
    objective: float
    local_error: float


StepFn: TypeAlias = Callable[
    [OptimizationState, int],
    Union[StepResult, tuple[OptimizationState, float, float]],
]
AuxiliaryFn: TypeAlias = Callable[[OptimizationState], JSONValue]


class Problem(Protocol):
    """What a problem factory must return."""

    def initial_state(self) -> OptimizationState:
        ...

    def step(
        self,
        state: OptimizationState,
        budget: int,
    ) -> StepResult | tuple[OptimizationState, float, float]:
        ...


def structures_match(
    stored: Sequence[SiteDescriptor],
    requested: Sequence[SiteDescriptor],
) -> bool:
    """Check that two structures agree in length and site by site."""
    if len(stored) != len(requested):
        return False
    return all(
        a.dim == b.dim and a.conserved == b.conserved
        for a, b in zip(stored, requested)
    )
