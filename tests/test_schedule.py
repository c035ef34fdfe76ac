# Copyright (c) Syntropy Systems
"""Tests for budget schedule expansion."""

import pytest
from pydantic import ValidationError

from resweep.errors import ConfigurationError
from resweep.models.schedule import AutoRamp, Constant, FixedList
from resweep.schedule import (
    build_schedule,
    doubling_ramp,
    expand,
    geometric_ramp,
    parse_schedule_spec,
)


class TestFixedList:
    """Tests for explicit budget lists."""

    @pytest.mark.parametrize("nsweeps", [0, 1, 2, 3, 4, 7, 12])
    def test_length_matches_nsweeps(self, nsweeps: int) -> None:
        """The schedule always has exactly nsweeps entries."""
        spec = FixedList(values=(50, 100, 200))
        assert len(expand(spec, nsweeps)) == nsweeps

    def test_prefix_when_list_is_long_enough(self) -> None:
        """A short run uses the head of the list."""
        spec = FixedList(values=(50, 100, 200, 400))
        assert expand(spec, 2) == [50, 100]
        assert expand(spec, 4) == [50, 100, 200, 400]

    def test_pad_with_last(self) -> None:
        """Missing entries repeat the last budget."""
        spec = FixedList(values=(50, 100, 200))
        assert expand(spec, 5) == [50, 100, 200, 200, 200]

    def test_zero_sweeps_is_empty(self) -> None:
        """nsweeps == 0 yields an empty schedule."""
        assert expand(FixedList(values=(5,)), 0) == []

    def test_empty_list_rejected(self) -> None:
        """An empty list is a configuration error."""
        with pytest.raises(ValidationError):
            _ = FixedList(values=())
        with pytest.raises(ConfigurationError):
            _ = parse_schedule_spec([])

    def test_negative_nsweeps_rejected(self) -> None:
        """Negative sweep counts are fatal."""
        with pytest.raises(ConfigurationError):
            _ = expand(FixedList(values=(10,)), -1)


class TestConstant:
    """Tests for constant budgets."""

    def test_constant_repeats(self) -> None:
        """A constant budget equals a one-element list."""
        assert expand(Constant(value=64), 4) == [64, 64, 64, 64]
        assert expand(Constant(value=64), 4) == expand(FixedList(values=(64,)), 4)

    def test_non_positive_rejected(self) -> None:
        """Budgets must be positive."""
        with pytest.raises(ConfigurationError):
            _ = parse_schedule_spec(0)


class TestAutoRamp:
    """Tests for automatic ramps."""

    def test_doubling_ramp(self) -> None:
        """Without a ramp length the budget doubles up to max."""
        spec = AutoRamp(max=800, min=50)
        assert expand(spec, 5) == [50, 100, 200, 400, 800]

    def test_doubling_ramp_padded(self) -> None:
        """The doubling ramp plateaus at max."""
        spec = AutoRamp(max=800, min=50)
        assert expand(spec, 6) == [50, 100, 200, 400, 800, 800]

    def test_doubling_ramp_caps_at_max(self) -> None:
        """Doubling never overshoots max."""
        assert doubling_ramp(50, 300) == [50, 100, 200, 300]
        assert doubling_ramp(300, 300) == [300]

    def test_doubling_ramp_truncated(self) -> None:
        """A short run takes the head of the doubling ramp."""
        assert expand(AutoRamp(max=800, min=50), 3) == [50, 100, 200]

    def test_geometric_ramp_endpoints(self) -> None:
        """The geometric ramp starts at min and ends exactly at max."""
        ramp = geometric_ramp(50, 800, 5)
        assert ramp == [50, 100, 200, 400, 800]

    def test_geometric_ramp_monotone_and_bounded(self) -> None:
        """Points never decrease and never exceed max."""
        for npoints in range(2, 15):
            ramp = geometric_ramp(3, 7, npoints)
            assert len(ramp) == npoints
            assert ramp[-1] == 7
            assert all(b >= a for a, b in zip(ramp, ramp[1:]))
            assert all(p <= 7 for p in ramp)

    def test_ramp_length_one(self) -> None:
        """A one-point ramp is just max."""
        spec = AutoRamp(max=400, min=10, ramp_length=1)
        assert expand(spec, 3) == [400, 400, 400]

    def test_ramp_length_clipped_to_nsweeps(self) -> None:
        """The ramp reaches max within nsweeps when ramp_length is longer."""
        spec = AutoRamp(max=800, min=50, ramp_length=10)
        schedule = expand(spec, 5)
        assert schedule == [50, 100, 200, 400, 800]

    def test_geometric_ramp_padded(self) -> None:
        """The geometric ramp plateaus after ramp_length sweeps."""
        spec = AutoRamp(max=1000, min=10, ramp_length=3)
        assert expand(spec, 5) == [10, 100, 1000, 1000, 1000]

    def test_min_above_max_rejected(self) -> None:
        """min > max is a configuration error."""
        with pytest.raises(ValidationError):
            _ = AutoRamp(max=10, min=20)
        with pytest.raises(ConfigurationError):
            _ = parse_schedule_spec({"max": 10, "min": 20})

    def test_max_below_one_rejected(self) -> None:
        """max must be at least 1."""
        with pytest.raises(ConfigurationError):
            _ = parse_schedule_spec({"max": 0, "min": 0})


class TestParseScheduleSpec:
    """Tests for the compact configuration forms."""

    def test_list(self) -> None:
        """A list becomes a FixedList."""
        assert parse_schedule_spec([1, 2]) == FixedList(values=(1, 2))

    def test_int(self) -> None:
        """An integer becomes a Constant."""
        assert parse_schedule_spec(32) == Constant(value=32)

    def test_mapping(self) -> None:
        """A mapping becomes an AutoRamp."""
        spec = parse_schedule_spec({"max": 800, "min": 50, "ramp_length": 4})
        assert spec == AutoRamp(max=800, min=50, ramp_length=4)

    def test_explicit_kind(self) -> None:
        """A mapping with a kind tag selects the variant."""
        spec = parse_schedule_spec({"kind": "fixed", "values": [3, 4]})
        assert spec == FixedList(values=(3, 4))

    def test_unsupported(self) -> None:
        """Other values are rejected."""
        with pytest.raises(ConfigurationError):
            _ = parse_schedule_spec("lots")
        with pytest.raises(ConfigurationError):
            _ = parse_schedule_spec(True)

    def test_build_schedule_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        """Building a schedule logs it."""
        caplog.set_level("INFO", logger="resweep")
        assert build_schedule(Constant(value=8), 2) == [8, 8]
        assert "Built constant schedule with 2 sweeps" in caplog.text
