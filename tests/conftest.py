# Copyright (c) Syntropy Systems
"""Pytest fixtures for resweep tests."""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from toy_problem import ToyChain

from resweep.config import parse_config
from resweep.models.config import RunConfig


@pytest.fixture
def checkpoint_path(tmp_path: Path) -> Path:
    """Checkpoint target inside a per-test directory."""
    return tmp_path / "ckpt" / "state.pkl"


@pytest.fixture
def toy() -> ToyChain:
    """A fresh toy problem."""
    return ToyChain()


@pytest.fixture
def make_config(checkpoint_path: Path) -> Callable[..., RunConfig]:
    """Build a RunConfig with checkpoints under the test directory."""

    def _make(**sections: Any) -> RunConfig:
        data: dict[str, Any] = {
            "sweeps": {"nsweeps": 10, "budget": [10, 20, 30]},
            "checkpoint": {"every": 0, "path": str(checkpoint_path)},
            "io": {"log_path": None, "console_log": False},
        }
        for name, values in sections.items():
            data.setdefault(name, {}).update(values)
        return parse_config(data)

    return _make
