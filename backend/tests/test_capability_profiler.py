"""
Tests for line capability profiling.
"""
import logging

import pytest

from planning.capability_profiler import build_line_capability, history_to_frame, profile_lines
from planning.schedule_models import ShiftType
from planning.shift_types import infer_shift_type, parse_shift_type, resolve_shift_type


class TestP1_Baselines:
    """P1: Averages and derived capacity per line."""

    def test_one_capability_per_line_sorted(self, sample_history, config):
        lines = profile_lines(sample_history, config)
        assert [line.line_id for line in lines] == ["L1-DS", "L2-NS"]

    def test_capacity_is_buffered_average_output(self, sample_history, config):
        l1 = profile_lines(sample_history, config)[0]

        assert l1.sample_count == 20
        assert l1.avg_actual_output == pytest.approx(98.0)
        assert l1.capacity_per_shift == pytest.approx(98.0 * 1.10)
        assert l1.efficiency_rate == pytest.approx(98.0)

    def test_manpower_band(self, sample_history, config):
        l1, l2 = profile_lines(sample_history, config)

        assert l1.min_manpower == pytest.approx(16.0)
        assert l1.max_manpower == pytest.approx(24.0)
        assert l2.min_manpower == pytest.approx(24.0)
        assert l2.max_manpower == pytest.approx(36.0)

    def test_min_manpower_floor(self, config):
        """P1.2: Small crews never plan below the floor of 5."""
        cap = build_line_capability("L5-DS", ShiftType.DS, 4.0, 4.0, 50.0, 45.0, 3, config)
        assert cap.min_manpower == 5.0

    def test_zero_plan_gives_zero_efficiency(self, make_record, config):
        records = [make_record(plan=0, actual_output=40)]
        cap = profile_lines(records, config)[0]
        assert cap.efficiency_rate == 0.0
        assert cap.capacity_per_shift == pytest.approx(44.0)

    def test_empty_history(self, config):
        assert profile_lines([], config) == []

    def test_frame_columns(self, sample_history):
        df = history_to_frame(sample_history)
        assert len(df) == len(sample_history)
        assert {"line_id", "plan", "actual_output", "manpower"} <= set(df.columns)


class TestP2_ShiftTypes:
    """P2: Explicit shift codes win; identifiers are the fallback."""

    def test_explicit_shift_type_wins(self, make_record, config):
        records = [make_record("ASSY-DS", shift_type=ShiftType.NS) for _ in range(3)]
        cap = profile_lines(records, config)[0]
        assert cap.shift_type == ShiftType.NS

    def test_inferred_from_identifier(self, sample_history, config):
        l1, l2 = profile_lines(sample_history, config)
        assert l1.shift_type == ShiftType.DS
        assert l2.shift_type == ShiftType.NS

    def test_unmatched_identifier_defaults_with_warning(self, config, caplog):
        with caplog.at_level(logging.WARNING):
            assert infer_shift_type("PACKING", config) == ShiftType.DS
        assert "PACKING" in caplog.text

    def test_profiled_line_without_tag_defaults(self, make_record, config, caplog):
        with caplog.at_level(logging.WARNING):
            cap = profile_lines([make_record("PACKING")], config)[0]
        assert cap.shift_type == ShiftType.DS
        assert "PACKING" in caplog.text

    def test_parse_shift_type(self):
        assert parse_shift_type(" ns ") == ShiftType.NS
        assert parse_shift_type("") is None
        assert parse_shift_type(None) is None

    def test_parse_rejects_unknown_code(self):
        with pytest.raises(ValueError):
            parse_shift_type("XS")

    def test_resolve_prefers_explicit(self, config):
        assert resolve_shift_type("L1-DS", "LS", config) == ShiftType.LS
        assert resolve_shift_type("L1-DS", None, config) == ShiftType.DS
