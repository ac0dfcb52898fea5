"""
Tests for the multi-day schedule orchestrator.
"""
import threading
from datetime import date, datetime, timedelta

import pytest

from planning.production_scheduler import (
    ProductionScheduler,
    ScheduleCancelledError,
    ScheduleDataError,
    date_range,
    normalize_forecast,
    to_date,
)
from planning.schedule_models import ScheduleResult, ShiftType
from conftest import FailingHistorySource, StaticHistorySource, StaticWorkloadSource

WEDNESDAY = date(2025, 3, 5)


class TestO1_Generation:
    """O1: Schedules cover every requested date."""

    def test_one_day_schedule_per_date(self, in_memory_scheduler):
        result = in_memory_scheduler.generate_schedule(WEDNESDAY, days=7)

        assert list(result.schedule.keys()) == [WEDNESDAY + timedelta(days=i) for i in range(7)]
        assert result.summary.total_days == 7
        assert result.start_date == WEDNESDAY

    def test_inputs_fetched_once_per_run(self, sample_history):
        history = StaticHistorySource(sample_history)
        scheduler = ProductionScheduler(history, StaticWorkloadSource())
        scheduler.generate_schedule(WEDNESDAY, days=5)
        assert history.calls == 1

    def test_day_of_week_reliability_applied(self, in_memory_scheduler):
        result = in_memory_scheduler.generate_schedule(WEDNESDAY, days=4)

        wednesday = result.schedule[WEDNESDAY].shifts[ShiftType.DS][0]
        friday = result.schedule[date(2025, 3, 7)].shifts[ShiftType.DS][0]
        saturday = result.schedule[date(2025, 3, 8)].shifts[ShiftType.DS][0]

        # capacity 98 × 1.10 = 107.8
        assert wednesday.historical_factor == pytest.approx(0.92)
        assert wednesday.adjusted_capacity == 99
        assert friday.historical_factor == pytest.approx(1.0)
        assert friday.adjusted_capacity == 108
        assert saturday.historical_factor == 1.0
        assert [r.type for r in saturday.risk_factors] == ["availability"]

    def test_no_forecast_plans_full_capacity(self, in_memory_scheduler):
        result = in_memory_scheduler.generate_schedule(WEDNESDAY, days=3)
        for day in result.iter_days():
            assert day.total_demand == 0
            for plan in day.iter_plans():
                assert plan.planned_output == plan.adjusted_capacity

    def test_forecast_with_string_dates(self, in_memory_scheduler):
        forecast = {"2025-03-05": {"L1-DS": 50, "L2-NS": 50}}
        result = in_memory_scheduler.generate_schedule("2025-03-05", days=2, demand_forecast=forecast)

        assert result.schedule[WEDNESDAY].total_demand == 100
        assert result.schedule[WEDNESDAY].allocated_demand == 100
        assert result.schedule[date(2025, 3, 6)].total_demand == 0

    def test_empty_history_yields_empty_days(self):
        scheduler = ProductionScheduler(StaticHistorySource([]), StaticWorkloadSource())
        result = scheduler.generate_schedule(WEDNESDAY, days=2)

        assert result.summary.total_capacity == 0
        assert result.recommendations == []
        assert all(day.iter_plans() == [] for day in result.iter_days())

    def test_invalid_days(self, in_memory_scheduler):
        with pytest.raises(ValueError):
            in_memory_scheduler.generate_schedule(WEDNESDAY, days=0)

    def test_idempotent(self, in_memory_scheduler):
        """O1.2: Identical inputs produce identical output."""
        first = in_memory_scheduler.generate_schedule(WEDNESDAY, days=7, demand_forecast={WEDNESDAY: {"L1-DS": 60}})
        second = in_memory_scheduler.generate_schedule(WEDNESDAY, days=7, demand_forecast={WEDNESDAY: {"L1-DS": 60}})
        assert first.to_dict() == second.to_dict()


class TestO2_Failures:
    """O2: Collaborator failures and cancellation."""

    def test_source_failure_wrapped(self):
        scheduler = ProductionScheduler(FailingHistorySource(), StaticWorkloadSource())
        with pytest.raises(ScheduleDataError) as exc_info:
            scheduler.generate_schedule(WEDNESDAY, days=3)
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_cancelled_before_first_date(self, in_memory_scheduler):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(ScheduleCancelledError):
            in_memory_scheduler.generate_schedule(WEDNESDAY, days=3, cancel_event=cancel)

    def test_unset_event_does_not_cancel(self, in_memory_scheduler):
        result = in_memory_scheduler.generate_schedule(WEDNESDAY, days=2, cancel_event=threading.Event())
        assert result.days == 2

    def test_save_without_store(self, in_memory_scheduler):
        result = in_memory_scheduler.generate_schedule(WEDNESDAY, days=1)
        with pytest.raises(ScheduleDataError):
            in_memory_scheduler.save_schedule(result)


class TestO3_Serialization:
    """O3: Results round-trip through their dict form for saving."""

    def test_from_dict_restores_plans(self, mixed_workload, sample_history):
        scheduler = ProductionScheduler(StaticHistorySource(sample_history), StaticWorkloadSource(mixed_workload))
        original = scheduler.generate_schedule(WEDNESDAY, days=3)

        restored = ScheduleResult.from_dict(original.to_dict())

        assert restored.to_dict() == original.to_dict()

    def test_result_dict_shape(self, in_memory_scheduler):
        data = in_memory_scheduler.generate_schedule(WEDNESDAY, days=1).to_dict()
        assert "success" not in data
        assert list(data["schedule"].keys()) == ["2025-03-05"]
        assert set(data["summary"].keys()) >= {"total_capacity", "utilization_rate", "efficiency_improvements"}

    @pytest.mark.parametrize("payload", [
        {"schedule": [1, 2]},
        {"schedule": {"2025-03-05": ["DS"]}},
        {"schedule": {"2025-03-05": {"date": "2025-03-05", "shifts": [1]}}},
        {"schedule": {"2025-03-05": {"date": "2025-03-05", "shifts": {"DS": "L1-DS"}}}},
        {"schedule": {}, "summary": [0]},
        [1, 2],
    ])
    def test_from_dict_rejects_wrong_shapes(self, payload):
        with pytest.raises(ValueError):
            ScheduleResult.from_dict(payload)


class TestO4_Helpers:

    def test_to_date(self):
        assert to_date("2025-03-05") == WEDNESDAY
        assert to_date(datetime(2025, 3, 5, 14, 30)) == WEDNESDAY
        assert to_date(WEDNESDAY) == WEDNESDAY

    def test_date_range_crosses_month(self):
        assert date_range(date(2025, 2, 27), 3) == [date(2025, 2, 27), date(2025, 2, 28), date(2025, 3, 1)]

    def test_normalize_forecast(self):
        assert normalize_forecast({"2025-03-05": {"L1-DS": 10}}) == {WEDNESDAY: {"L1-DS": 10.0}}
        assert normalize_forecast(None) == {}
