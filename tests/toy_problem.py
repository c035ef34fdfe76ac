# Copyright (c) Syntropy Systems
"""Deterministic toy problem used as the external step in tests."""
from __future__ import annotations

from resweep.state import OptimizationState, StepResult


class ToyChain:
    """Objective relaxes geometrically towards -1; error shrinks with budget.

    After sweep k from the initial state the objective is ``-1 + decay**k``
    and the payload counts the sweeps applied so far.
    """

    def __init__(
        self,
        length: int = 4,
        dim: int = 3,
        conserved: bool = True,
        decay: float = 0.5,
        crash_on_call: int | None = None,
    ) -> None:
        self.length = length
        self.dim = dim
        self.conserved = conserved
        self.decay = decay
        self.crash_on_call = crash_on_call
        self.calls: list[int] = []
        self.aux_calls = 0

    def structure(self) -> list[tuple[int, bool]]:
        return [(self.dim, self.conserved)] * self.length

    def initial_state(self) -> OptimizationState:
        return OptimizationState.create({"gap": 1.0, "sweeps": 0}, self.structure())

    def step(self, state: OptimizationState, budget: int) -> StepResult:
        self.calls.append(budget)
        if self.crash_on_call is not None and len(self.calls) >= self.crash_on_call:
            msg = f"simulated crash in call {len(self.calls)}"
            raise RuntimeError(msg)
        payload = state.payload
        assert isinstance(payload, dict)
        gap = payload["gap"] * self.decay
        new_state = OptimizationState(
            payload={"gap": gap, "sweeps": payload["sweeps"] + 1},
            structure=state.structure,
        )
        return StepResult(new_state, -1.0 + gap, 1.0 / budget)

    def auxiliary(self, state: OptimizationState) -> dict[str, list[float]]:
        self.aux_calls += 1
        payload = state.payload
        assert isinstance(payload, dict)
        return {"density": [payload["gap"]] * len(state.structure)}


def make_problem(**params: object) -> ToyChain:
    """Problem factory referenced from test configurations."""
    return ToyChain(**params)  # type: ignore[arg-type]


class NotAProblem:
    """Factory result without a step method."""

    def initial_state(self) -> None:
        return None
