"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    PRODUCTION SCHEDULER — Multi-Day Shift Planning Controller
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Drives the scheduling components across a date range:

    fetch history + workload (once)
        ├── profile_lines      → LineCapability[]
        └── aggregate_history  → day/line reliability index
    for each date in [start, start + days):
        generate_day(...)      → DaySchedule
    summarize_schedule(...)    → ScheduleSummary, recommendations

Persistence and data access are delegated to collaborators (history source,
workload source, schedule store). A run either returns a complete
ScheduleResult or raises; partial schedules are never returned.

Usage:
    scheduler = ProductionScheduler(history_source, workload_source, store)
    result = scheduler.generate_schedule(date(2025, 3, 3), days=7, demand_forecast={...})
    scheduler.save_schedule(result, created_by="Production Manager")

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .capability_profiler import profile_lines
from .day_scheduler import generate_day
from .historical_performance import aggregate_history
from .schedule_models import HistoryRecord, ScheduleResult, WorkloadSnapshot
from .schedule_summary import summarize_schedule
from .scheduler_config import SchedulerConfig, get_scheduler_config

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]
DemandForecast = Mapping[Any, Mapping[str, float]]


# ═══════════════════════════════════════════════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════════════════════════════════════════════

class ScheduleDataError(Exception):
    """A collaborator failed to read or write scheduling data."""


class ScheduleCancelledError(Exception):
    """Generation was cancelled before all dates were planned."""


# ═══════════════════════════════════════════════════════════════════════════════
# COLLABORATOR INTERFACES
# ═══════════════════════════════════════════════════════════════════════════════

class HistorySource(ABC):
    """Past daily performance records."""

    @abstractmethod
    def fetch_history(self, lookback_days: int) -> List[HistoryRecord]:
        """Records from the last `lookback_days` days, newest first."""


class WorkloadSource(ABC):
    """Current maintenance and bottleneck snapshot."""

    @abstractmethod
    def fetch_workload(self) -> WorkloadSnapshot:
        ...


class ScheduleStore(ABC):
    """Persistence of generated schedules."""

    @abstractmethod
    def save_schedule(self, result: ScheduleResult, created_by: str) -> int:
        """Upsert every (date, line) plan atomically; returns rows written."""

    @abstractmethod
    def get_active_schedules(self, days: int) -> List[Dict[str, Any]]:
        """Saved plans from today through today + days."""


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def to_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(str(value)).date()


def date_range(start: date, days: int) -> List[date]:
    return [start + relativedelta(days=i) for i in range(days)]


def normalize_forecast(demand_forecast: Optional[DemandForecast]) -> Dict[date, Dict[str, float]]:
    """Key the forecast by date; per-line values become floats."""
    normalized: Dict[date, Dict[str, float]] = {}
    for key, by_line in (demand_forecast or {}).items():
        normalized[to_date(key)] = {str(line): float(units) for line, units in (by_line or {}).items()}
    return normalized


# ═══════════════════════════════════════════════════════════════════════════════
# ORCHESTRATOR
# ═══════════════════════════════════════════════════════════════════════════════

class ProductionScheduler:
    """
    Multi-day shift schedule generator.
    """

    def __init__(
        self,
        history_source: HistorySource,
        workload_source: WorkloadSource,
        store: Optional[ScheduleStore] = None,
        config: Optional[SchedulerConfig] = None,
    ):
        self.history_source = history_source
        self.workload_source = workload_source
        self.store = store
        self.config = config or get_scheduler_config()

    def _fetch_inputs(self):
        try:
            history = self.history_source.fetch_history(self.config.lookback_days)
            workload = self.workload_source.fetch_workload()
        except ScheduleDataError:
            raise
        except Exception as e:
            logger.exception("Failed to load scheduling inputs")
            raise ScheduleDataError(f"Failed to load scheduling inputs: {e}") from e
        return history, workload

    def generate_schedule(
        self,
        start_date: DateLike,
        days: int = 7,
        demand_forecast: Optional[DemandForecast] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ScheduleResult:
        """
        Generate a shift schedule for `days` consecutive dates.

        Args:
            start_date: First date to plan
            days: Number of dates (>= 1)
            demand_forecast: {date: {line_id: units}}; missing dates plan at full capacity
            cancel_event: When set, generation stops before the next date

        Returns:
            ScheduleResult with per-date schedules, summary and recommendations

        Raises:
            ValueError: days < 1
            ScheduleDataError: history or workload could not be loaded
            ScheduleCancelledError: cancel_event was set during generation
        """
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")

        start = to_date(start_date)
        forecast = normalize_forecast(demand_forecast)
        logger.info(f"Generating schedule from {start} for {days} days ({len(forecast)} forecast dates)")

        history, workload = self._fetch_inputs()
        lines = profile_lines(history, self.config)
        index = aggregate_history(history, self.config)

        schedule = {}
        for current in date_range(start, days):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Schedule generation cancelled at {current}")
                raise ScheduleCancelledError(f"Schedule generation cancelled at {current.isoformat()}")
            schedule[current] = generate_day(
                current,
                lines,
                index,
                workload,
                forecast.get(current, {}),
                self.config,
            )

        summary, recommendations = summarize_schedule(schedule.values(), self.config)

        return ScheduleResult(
            start_date=start,
            days=days,
            schedule=schedule,
            summary=summary,
            recommendations=recommendations,
        )

    def _require_store(self) -> ScheduleStore:
        if self.store is None:
            raise ScheduleDataError("No schedule store configured")
        return self.store

    def save_schedule(self, result: ScheduleResult, created_by: str = "System") -> int:
        """Persist a generated schedule; all rows or none."""
        rows = self._require_store().save_schedule(result, created_by)
        logger.info(f"Saved {rows} shift plans ({result.days} days) by {created_by}")
        return rows

    def get_active_schedules(self, days: int = 7) -> List[Dict[str, Any]]:
        return self._require_store().get_active_schedules(days)
