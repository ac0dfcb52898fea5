"""
Schedule summary and advisory recommendations over a multi-day schedule.

Recommendations are strings only; they never alter the computed schedule.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from .schedule_models import DaySchedule, EfficiencyImprovement, ScheduleSummary
from .scheduler_config import SchedulerConfig, get_scheduler_config

logger = logging.getLogger(__name__)

# Improvements below this are rounding noise
_IMPROVEMENT_EPSILON = 1e-9


def utilization_rate(total_allocated: float, total_capacity: float) -> float:
    return total_allocated / total_capacity * 100 if total_capacity > 0 else 0.0


def build_summary(days: Iterable[DaySchedule], config: Optional[SchedulerConfig] = None) -> ScheduleSummary:
    config = config or get_scheduler_config()
    summary = ScheduleSummary()

    for day in days:
        summary.total_days += 1
        summary.total_capacity += day.total_capacity
        summary.total_allocated += day.allocated_demand

        for plan in day.iter_plans():
            summary.constraint_count += len(plan.constraints)
            if plan.risk_factors:
                summary.high_risk_shifts += 1

            current = plan.efficiency_rate * config.efficiency_baseline
            if plan.efficiency_target - current > _IMPROVEMENT_EPSILON:
                summary.efficiency_improvements.append(EfficiencyImprovement(
                    line=plan.line_id,
                    current=round(current, 1),
                    target=round(plan.efficiency_target, 1),
                    improvement=round(plan.efficiency_target - current, 1),
                ))

    summary.utilization_rate = utilization_rate(summary.total_allocated, summary.total_capacity)
    return summary


def build_recommendations(days: Iterable[DaySchedule], config: Optional[SchedulerConfig] = None) -> List[str]:
    config = config or get_scheduler_config()
    recommendations: List[str] = []

    total_capacity = 0
    total_allocated = 0.0
    constraint_heavy_shifts = 0
    underutilized_lines: List[str] = []

    for day in days:
        total_capacity += day.total_capacity
        total_allocated += day.allocated_demand

        for plan in day.iter_plans():
            if len(plan.constraints) > config.constraint_heavy_per_shift:
                constraint_heavy_shifts += 1

            shift_utilization = plan.utilization_pct
            if shift_utilization is not None and shift_utilization < config.underutilized_line_pct:
                if plan.line_id not in underutilized_lines:
                    underutilized_lines.append(plan.line_id)

    if total_capacity > 0:
        overall = utilization_rate(total_allocated, total_capacity)
        if overall < config.low_utilization_pct:
            recommendations.append(
                "Low overall utilization detected. Consider increasing production targets "
                "or optimizing manpower allocation."
            )
        if overall > config.high_utilization_pct:
            recommendations.append(
                "High utilization rate. Consider adding buffer capacity or backup plans for contingencies."
            )

    if constraint_heavy_shifts > config.constraint_heavy_shift_limit:
        recommendations.append(
            "Multiple shifts facing constraints. Review maintenance scheduling "
            "and bottleneck resolution priorities."
        )

    if underutilized_lines:
        recommendations.append(
            f"Lines with low utilization detected: {', '.join(underutilized_lines)}. "
            "Consider reallocating resources."
        )

    return recommendations


def summarize_schedule(
    days: Iterable[DaySchedule],
    config: Optional[SchedulerConfig] = None,
) -> Tuple[ScheduleSummary, List[str]]:
    """Summary statistics and recommendations for a full schedule."""
    days = list(days)
    summary = build_summary(days, config)
    recommendations = build_recommendations(days, config)
    logger.info(
        f"Schedule summary: {summary.total_days} days, capacity={summary.total_capacity}, "
        f"utilization={summary.utilization_rate:.1f}%, {len(recommendations)} recommendations"
    )
    return summary, recommendations
