"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    HISTORICAL PERFORMANCE — Day-of-Week Reliability
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Summarizes past shift records into per-line, per-day-of-week statistics.

For each (ISO day-of-week d, line l):
    samples       = |R_d,l|
    Σ efficiency, Σ completion, Σ absenteeism, Σ output, Σ plan over R_d,l
    reliability   = avg(completion) / 100

Combinations without samples are absent from the index. Consumers treat
absence as "no adjustment" (factor 1.0), never as zero reliability.

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import reduce
from itertools import groupby
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from .performance_formulas import absenteeism_rate, plan_completion, record_efficiency
from .schedule_models import HistoricalCell, HistoryRecord
from .scheduler_config import SchedulerConfig, get_scheduler_config

logger = logging.getLogger(__name__)

HistoricalIndex = Mapping[int, Mapping[str, HistoricalCell]]

EMPTY_INDEX: HistoricalIndex = MappingProxyType({})


def _cell_key(record: HistoryRecord) -> Tuple[int, str]:
    return record.day_of_week, record.line_id


def fold_record(
    cell: HistoricalCell,
    record: HistoryRecord,
    config: Optional[SchedulerConfig] = None,
) -> HistoricalCell:
    """Return a new cell with one record's metrics added."""
    return replace(
        cell,
        samples=cell.samples + 1,
        total_efficiency=cell.total_efficiency + record_efficiency(record, config),
        total_completion=cell.total_completion + plan_completion(record.actual_output, record.plan),
        total_absenteeism=cell.total_absenteeism + absenteeism_rate(record.absent, record.manpower),
        total_output=cell.total_output + record.actual_output,
        total_plan=cell.total_plan + record.plan,
    )


def aggregate_history(
    history: Iterable[HistoryRecord],
    config: Optional[SchedulerConfig] = None,
) -> HistoricalIndex:
    """
    Fold history records into a read-only day-of-week → line → cell index.

    Args:
        history: Records from the lookback window, any order
        config: Scheduler configuration (shift hours for efficiency)

    Returns:
        Immutable nested mapping; averages are derived on the cells
    """
    config = config or get_scheduler_config()
    records = sorted(history, key=_cell_key)

    index = {}
    for (day_of_week, line_id), group in groupby(records, key=_cell_key):
        cell = reduce(
            lambda acc, rec: fold_record(acc, rec, config),
            group,
            HistoricalCell(day_of_week=day_of_week, line_id=line_id),
        )
        index.setdefault(day_of_week, {})[line_id] = cell

    logger.debug(
        f"Aggregated {len(records)} records into "
        f"{sum(len(lines) for lines in index.values())} day/line cells"
    )
    return MappingProxyType({d: MappingProxyType(lines) for d, lines in index.items()})


def lookup_cell(index: HistoricalIndex, day_of_week: int, line_id: str) -> Optional[HistoricalCell]:
    """Cell for (day, line), or None when there were no samples."""
    cell = index.get(day_of_week, {}).get(line_id)
    if cell is None or cell.samples == 0:
        return None
    return cell
