"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    DAY SCHEDULER — Per-Date Capacity and Output Plan
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Combines baseline capacity, historical reliability and live constraints into
per-shift capacity for one calendar date, then allocates forecast demand.

Per line l on date t (d = ISO weekday of t):
    H_l,d   = clamp(reliability_l,d, 0, 1) × 0.8 + 0.2     (1.0 when no history for d)
    K_l     = constraint factor of l
    C̃_l,t   = round(capacity_per_shift_l × H_l,d × K_l)
    E*_l    = min(efficiency_rate_l × 1.05, 100)

Demand allocation (whole day):
    D_t     = Σ_l demand_l,t
    A_t     = min(D_t, Σ_l C̃_l,t)
    if D_t > 0:  output_l,t = round(C̃_l,t × min(Σ C̃ / D_t, 1))
    else:        output_l,t = C̃_l,t

Missing inputs never raise: absent history → H = 1.0, absent workload → K = 1.0.

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Mapping, Optional

from .constraint_resolver import build_priority_tasks, resolve_line_constraints
from .historical_performance import EMPTY_INDEX, HistoricalIndex, lookup_cell
from .performance_formulas import round_units
from .schedule_models import (
    DaySchedule,
    LineCapability,
    RiskFactor,
    RiskSeverity,
    ShiftPlan,
    WorkloadSnapshot,
)
from .scheduler_config import SchedulerConfig, get_scheduler_config

logger = logging.getLogger(__name__)


def historical_factor(
    index: HistoricalIndex,
    day_of_week: int,
    line_id: str,
    config: Optional[SchedulerConfig] = None,
) -> float:
    """Blend historical reliability into a factor in [floor, 1.0]; 1.0 without samples."""
    config = config or get_scheduler_config()
    cell = lookup_cell(index, day_of_week, line_id)
    if cell is None:
        return 1.0
    reliability = min(max(cell.reliability, 0.0), 1.0)
    return reliability * config.historical_weight + config.historical_floor


def efficiency_target(efficiency_rate: float, config: Optional[SchedulerConfig] = None) -> float:
    """Stretch goal over the current efficiency, capped."""
    config = config or get_scheduler_config()
    return min(efficiency_rate * config.efficiency_stretch, config.efficiency_cap)


def identify_risk_factors(
    schedule_date: date,
    constraint_factor: float,
    hist_factor: float,
    config: Optional[SchedulerConfig] = None,
) -> List[RiskFactor]:
    config = config or get_scheduler_config()
    risks: List[RiskFactor] = []

    if constraint_factor < config.constraint_risk_threshold:
        risks.append(RiskFactor(
            type="constraint",
            description="High constraint load affecting capacity",
            severity=(
                RiskSeverity.HIGH
                if constraint_factor < config.constraint_high_risk_threshold
                else RiskSeverity.MEDIUM
            ),
        ))

    if hist_factor < config.performance_risk_threshold:
        risks.append(RiskFactor(
            type="performance",
            description="Historical performance indicates reliability concerns",
            severity=(
                RiskSeverity.HIGH
                if hist_factor < config.performance_high_risk_threshold
                else RiskSeverity.MEDIUM
            ),
        ))

    if schedule_date.isoweekday() in config.weekend_days:
        risks.append(RiskFactor(
            type="availability",
            description="Weekend operations may have reduced support",
            severity=RiskSeverity.MEDIUM,
        ))

    return risks


def plan_line(
    schedule_date: date,
    line: LineCapability,
    index: HistoricalIndex,
    workload: Optional[WorkloadSnapshot],
    config: Optional[SchedulerConfig] = None,
) -> ShiftPlan:
    """Capacity plan for one line before demand allocation."""
    config = config or get_scheduler_config()

    h_factor = historical_factor(index, schedule_date.isoweekday(), line.line_id, config)
    resolution = resolve_line_constraints(line.line_id, workload, config)

    adjusted = round_units(line.capacity_per_shift * h_factor * resolution.factor)

    return ShiftPlan(
        line_id=line.line_id,
        shift_type=line.shift_type,
        base_capacity=round_units(line.capacity_per_shift),
        adjusted_capacity=adjusted,
        planned_output=adjusted,
        recommended_manpower=line.avg_manpower,
        min_manpower=line.min_manpower,
        max_manpower=line.max_manpower,
        efficiency_rate=line.efficiency_rate,
        efficiency_target=efficiency_target(line.efficiency_rate, config),
        historical_factor=h_factor,
        constraint_factor=resolution.factor,
        constraints=list(resolution.descriptions),
        priority_tasks=build_priority_tasks(resolution),
        risk_factors=identify_risk_factors(schedule_date, resolution.factor, h_factor, config),
    )


def allocate_demand(day: DaySchedule, demand_by_line: Optional[Mapping[str, float]]) -> DaySchedule:
    """
    Scale planned output of every shift to the day's total demand.

    Without demand the plan stays at full adjusted capacity.
    """
    total_demand = float(sum((demand_by_line or {}).values()))
    day.total_demand = total_demand
    day.allocated_demand = min(total_demand, float(day.total_capacity))

    if total_demand > 0:
        demand_factor = min(day.total_capacity / total_demand, 1.0)
        for plan in day.iter_plans():
            plan.planned_output = round_units(plan.adjusted_capacity * demand_factor)

    return day


def generate_day(
    schedule_date: date,
    lines: Iterable[LineCapability],
    index: Optional[HistoricalIndex] = None,
    workload: Optional[WorkloadSnapshot] = None,
    demand_by_line: Optional[Mapping[str, float]] = None,
    config: Optional[SchedulerConfig] = None,
) -> DaySchedule:
    """
    Build the schedule for one date.

    Args:
        schedule_date: Date to plan
        lines: Profiled line capabilities
        index: Historical day/line cells (None → no historical adjustment)
        workload: Maintenance and bottleneck snapshot (None → no constraints)
        demand_by_line: Forecast units per line for this date
        config: Scheduler configuration

    Returns:
        DaySchedule with shifts grouped by shift type
    """
    config = config or get_scheduler_config()
    index = index if index is not None else EMPTY_INDEX

    day = DaySchedule(date=schedule_date, day_of_week=schedule_date.isoweekday())

    for line in lines:
        plan = plan_line(schedule_date, line, index, workload, config)
        day.shifts[plan.shift_type].append(plan)
        day.total_capacity += plan.adjusted_capacity
        logger.debug(
            f"{schedule_date} {line.line_id}: base={plan.base_capacity} "
            f"H={plan.historical_factor:.3f} K={plan.constraint_factor:.3f} adjusted={plan.adjusted_capacity}"
        )

    return allocate_demand(day, demand_by_line)
