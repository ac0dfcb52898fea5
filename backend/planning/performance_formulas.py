"""
Plant performance formulas shared by the history aggregator and profiler.

    Used MHR        = no_ot_mp * regular_shift_hours + ot_mp * ot_hours
    Efficiency (%)  = output / used_mhr * 100
    Completion (%)  = actual / plan * 100
    Absenteeism (%) = absent / mp * 100

All ratios return 0 when the denominator is 0.
"""

from __future__ import annotations

import math
from typing import Optional

from .schedule_models import HistoryRecord
from .scheduler_config import SchedulerConfig, get_scheduler_config


def used_man_hours(
    no_ot_manpower: float,
    ot_manpower: float,
    ot_hours: float,
    regular_shift_hours: float = 7.66,
) -> float:
    return no_ot_manpower * regular_shift_hours + ot_manpower * ot_hours


def efficiency(output: float, used_mhr: float) -> float:
    return output / used_mhr * 100 if used_mhr > 0 else 0.0


def plan_completion(actual: float, plan: float) -> float:
    return actual / plan * 100 if plan > 0 else 0.0


def absenteeism_rate(absent: float, manpower: float) -> float:
    return absent / manpower * 100 if manpower > 0 else 0.0


def record_efficiency(record: HistoryRecord, config: Optional[SchedulerConfig] = None) -> float:
    """Efficiency of one history record against its used man-hours."""
    config = config or get_scheduler_config()
    mhr = used_man_hours(
        record.no_ot_manpower,
        record.ot_manpower,
        record.ot_hours,
        config.regular_shift_hours,
    )
    return efficiency(record.actual_output, mhr)


def round_units(value: float) -> int:
    """Round a non-negative unit count half-up (92.5 -> 93)."""
    if value <= 0:
        return 0
    return int(math.floor(value + 0.5))
