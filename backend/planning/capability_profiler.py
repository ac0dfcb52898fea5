"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    CAPABILITY PROFILER — Line Baselines
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Computes each production line's baseline capacity and manpower envelope from
a trailing window of daily records.

Per line l (averages over the window):
    efficiency_rate     = avg_actual_output / avg_daily_plan × 100     (0 if plan = 0)
    capacity_per_shift  = avg_actual_output × buffer                   (buffer = 1.10)
    min_manpower        = max(avg_manpower × 0.8, 5)
    max_manpower        = avg_manpower × 1.2

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import pandas as pd

from .schedule_models import HistoryRecord, LineCapability, ShiftType
from .scheduler_config import SchedulerConfig, get_scheduler_config
from .shift_types import resolve_shift_type

logger = logging.getLogger(__name__)

_COLUMNS = ["line_id", "shift_type", "manpower", "no_ot_manpower", "plan", "actual_output"]


def history_to_frame(history: Iterable[HistoryRecord]) -> pd.DataFrame:
    """Flatten history records into a DataFrame for grouping."""
    rows = [
        {
            "line_id": r.line_id,
            "shift_type": r.shift_type.value if r.shift_type else None,
            "manpower": float(r.manpower),
            "no_ot_manpower": float(r.no_ot_manpower),
            "plan": float(r.plan),
            "actual_output": float(r.actual_output),
        }
        for r in history
    ]
    return pd.DataFrame(rows, columns=_COLUMNS)


def _line_shift_type(shift_values: pd.Series, line_id: str, config: SchedulerConfig) -> ShiftType:
    explicit = shift_values.dropna()
    return resolve_shift_type(line_id, explicit.mode().iloc[0] if not explicit.empty else None, config)


def build_line_capability(
    line_id: str,
    shift_type: ShiftType,
    avg_manpower: float,
    avg_no_ot_manpower: float,
    avg_daily_plan: float,
    avg_actual_output: float,
    sample_count: int,
    config: Optional[SchedulerConfig] = None,
) -> LineCapability:
    """Create a LineCapability with its derived fields."""
    config = config or get_scheduler_config()

    efficiency_rate = (avg_actual_output / avg_daily_plan) * 100 if avg_daily_plan > 0 else 0.0
    min_manpower = max(avg_manpower * config.min_manpower_ratio, config.min_manpower_floor)

    return LineCapability(
        line_id=line_id,
        shift_type=shift_type,
        avg_manpower=avg_manpower,
        avg_no_ot_manpower=avg_no_ot_manpower,
        avg_daily_plan=avg_daily_plan,
        avg_actual_output=avg_actual_output,
        sample_count=sample_count,
        efficiency_rate=efficiency_rate,
        capacity_per_shift=avg_actual_output * config.capacity_buffer,
        min_manpower=min_manpower,
        max_manpower=avg_manpower * config.max_manpower_ratio,
    )


def profile_lines(
    history: Iterable[HistoryRecord],
    config: Optional[SchedulerConfig] = None,
) -> List[LineCapability]:
    """
    Profile every line seen in the history window.

    Args:
        history: Raw records for the window (caller selects the window)
        config: Scheduler configuration

    Returns:
        One LineCapability per distinct line, ordered by line id
    """
    config = config or get_scheduler_config()
    df = history_to_frame(history)

    if df.empty:
        logger.info("No history in window; no line capabilities profiled")
        return []

    grouped = df.groupby("line_id", sort=True)
    means = grouped[["manpower", "no_ot_manpower", "plan", "actual_output"]].mean()
    counts = grouped.size()

    capabilities = []
    for line_id, row in means.iterrows():
        capabilities.append(
            build_line_capability(
                line_id=str(line_id),
                shift_type=_line_shift_type(grouped.get_group(line_id)["shift_type"], str(line_id), config),
                avg_manpower=float(row["manpower"]),
                avg_no_ot_manpower=float(row["no_ot_manpower"]),
                avg_daily_plan=float(row["plan"]),
                avg_actual_output=float(row["actual_output"]),
                sample_count=int(counts[line_id]),
                config=config,
            )
        )

    logger.info(f"Profiled {len(capabilities)} production lines from {len(df)} records")
    return capabilities
