# Copyright (c) Syntropy Systems
"""Loading the external optimization problem from an import path."""
from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Callable, cast

from resweep.errors import ConfigurationError, ProblemLoadError

if TYPE_CHECKING:
    from resweep.models.config import ProblemSection
    from resweep.state import AuxiliaryFn, Problem


def resolve_factory(target: str) -> Callable[..., object]:
    """Import ``package.module:attribute`` and return the attribute."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        msg = f"Problem factory must be 'package.module:callable', got {target!r}"
        raise ConfigurationError(msg)

    try:
        obj: object = importlib.import_module(module_name)
    except ImportError as e:
        msg = f"Cannot import problem module {module_name!r}: {e}"
        raise ProblemLoadError(msg) from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            msg = f"Module {module_name!r} has no attribute {attr_path!r}"
            raise ProblemLoadError(msg) from e

    if not callable(obj):
        msg = f"Problem factory {target!r} is not callable"
        raise ProblemLoadError(msg)
    return cast("Callable[..., object]", obj)


def load_problem(section: ProblemSection) -> Problem:
    """Call the configured factory with its params and check the result."""
    if section.factory is None:
        msg = "No problem factory configured (problem.factory)"
        raise ConfigurationError(msg)

    factory = resolve_factory(section.factory)
    try:
        problem = factory(**section.params)
    except Exception as e:  # noqa: BLE001
        msg = f"Problem factory {section.factory!r} failed: {e}"
        raise ProblemLoadError(msg) from e
    for name in ("initial_state", "step"):
        if not callable(getattr(problem, name, None)):
            msg = f"Problem from {section.factory!r} has no callable {name}()"
            raise ProblemLoadError(msg)
    return cast("Problem", problem)


def auxiliary_of(problem: Problem) -> AuxiliaryFn | None:
    """Return the problem's optional auxiliary measurement."""
    measure = getattr(problem, "auxiliary", None)
    return cast("AuxiliaryFn", measure) if callable(measure) else None
