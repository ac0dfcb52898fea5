"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    SHIFTPLAN — SHIFT PRODUCTION SCHEDULING ENGINE
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Multi-day, per-shift production schedules built from:
- Trailing daily performance history (line capability baselines)
- Day-of-week reliability per line
- Live maintenance and bottleneck workload
- Optional demand forecast per date and line

Output per date and shift: adjusted capacity, planned output, manpower band,
efficiency target, constraints, priority tasks and risk factors, plus a
schedule-wide summary and advisory recommendations.
"""

from .scheduler_config import (
    SchedulerConfig,
    SchedulerSettings,
    get_scheduler_config,
    load_config_from_env,
)

from .schedule_models import (
    ShiftType,
    TaskPriority,
    RiskSeverity,
    HistoryRecord,
    MaintenanceConstraint,
    BottleneckConstraint,
    WorkloadSnapshot,
    LineCapability,
    HistoricalCell,
    PriorityTask,
    RiskFactor,
    ShiftPlan,
    DaySchedule,
    EfficiencyImprovement,
    ScheduleSummary,
    ScheduleResult,
)

from .capability_profiler import profile_lines
from .historical_performance import aggregate_history, lookup_cell
from .constraint_resolver import resolve_constraints, build_priority_tasks
from .day_scheduler import generate_day
from .schedule_summary import summarize_schedule

from .production_scheduler import (
    ProductionScheduler,
    HistorySource,
    WorkloadSource,
    ScheduleStore,
    ScheduleDataError,
    ScheduleCancelledError,
)

__all__ = [
    # Config
    "SchedulerConfig", "SchedulerSettings", "get_scheduler_config", "load_config_from_env",
    # Models
    "ShiftType", "TaskPriority", "RiskSeverity",
    "HistoryRecord", "MaintenanceConstraint", "BottleneckConstraint", "WorkloadSnapshot",
    "LineCapability", "HistoricalCell", "PriorityTask", "RiskFactor",
    "ShiftPlan", "DaySchedule", "EfficiencyImprovement", "ScheduleSummary", "ScheduleResult",
    # Components
    "profile_lines", "aggregate_history", "lookup_cell",
    "resolve_constraints", "build_priority_tasks",
    "generate_day", "summarize_schedule",
    # Orchestrator
    "ProductionScheduler", "HistorySource", "WorkloadSource", "ScheduleStore",
    "ScheduleDataError", "ScheduleCancelledError",
]
