"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    CONSTRAINT RESOLVER — Live Capacity Reductions
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Merges pending maintenance and open bottlenecks into one capacity factor per line.

    factor = 1.0
    × 0.70   per maintenance entry of the line with pending_count > 0
    × 0.50   per bottleneck entry of the line with critical_count > 0
    × 0.80   per other bottleneck entry of the line

Entries compound: concurrent constraints degrade capacity further rather than
replacing each other. The factor is non-increasing from 1.0 and never negative.

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .schedule_models import (
    BottleneckConstraint,
    MaintenanceConstraint,
    PriorityTask,
    TaskPriority,
    WorkloadSnapshot,
)
from .scheduler_config import SchedulerConfig, get_scheduler_config


@dataclass(frozen=True)
class ConstraintResolution:
    """Capacity factor of one line plus the constraints behind it."""
    factor: float = 1.0
    descriptions: List[str] = field(default_factory=list)
    maintenance: List[MaintenanceConstraint] = field(default_factory=list)
    bottlenecks: List[BottleneckConstraint] = field(default_factory=list)


def _pending_maintenance(line_id: str, workload: Optional[WorkloadSnapshot]) -> List[MaintenanceConstraint]:
    if workload is None:
        return []
    return [m for m in workload.maintenance if m.line_id == line_id and m.pending_count > 0]


def _line_bottlenecks(line_id: str, workload: Optional[WorkloadSnapshot]) -> List[BottleneckConstraint]:
    if workload is None:
        return []
    return [b for b in workload.bottlenecks if b.line_id == line_id]


def resolve_line_constraints(
    line_id: str,
    workload: Optional[WorkloadSnapshot],
    config: Optional[SchedulerConfig] = None,
) -> ConstraintResolution:
    """Full resolution for a line, keeping the matched entries for task generation."""
    config = config or get_scheduler_config()
    factor = 1.0
    descriptions: List[str] = []

    maintenance = _pending_maintenance(line_id, workload)
    for entry in maintenance:
        factor *= config.maintenance_factor
        descriptions.append(f"Maintenance scheduled ({entry.pending_count} items)")

    bottlenecks = _line_bottlenecks(line_id, workload)
    for entry in bottlenecks:
        if entry.critical_count > 0:
            factor *= config.critical_bottleneck_factor
            descriptions.append(f"Critical bottlenecks active ({entry.critical_count})")
        else:
            factor *= config.bottleneck_factor
            descriptions.append(f"Bottlenecks active ({entry.bottleneck_count})")

    return ConstraintResolution(
        factor=max(factor, 0.0),
        descriptions=descriptions,
        maintenance=maintenance,
        bottlenecks=bottlenecks,
    )


def resolve_constraints(
    line_id: str,
    workload: Optional[WorkloadSnapshot],
    config: Optional[SchedulerConfig] = None,
) -> Tuple[float, List[str]]:
    """
    Capacity factor and constraint descriptions for one line.

    Returns:
        (factor, descriptions)
    """
    resolution = resolve_line_constraints(line_id, workload, config)
    return resolution.factor, list(resolution.descriptions)


def build_priority_tasks(resolution: ConstraintResolution) -> List[PriorityTask]:
    """
    Deterministic task list for a shift.

    Maintenance and bottleneck tasks follow the matched constraints; quality
    and safety checks are always appended.
    """
    tasks: List[PriorityTask] = []

    for entry in resolution.maintenance:
        tasks.append(PriorityTask(
            type="maintenance",
            description="Complete pending maintenance activities",
            priority=TaskPriority.HIGH,
            estimated_time=entry.total_hours or 0.0,
        ))

    for entry in resolution.bottlenecks:
        if entry.critical_count > 0:
            tasks.append(PriorityTask(
                type="bottleneck",
                description="Resolve critical bottlenecks",
                priority=TaskPriority.CRITICAL,
                impact="Production capacity severely reduced",
            ))
        else:
            tasks.append(PriorityTask(
                type="bottleneck",
                description="Address ongoing bottlenecks",
                priority=TaskPriority.HIGH,
                impact="Production capacity reduced",
            ))

    tasks.append(PriorityTask(
        type="quality",
        description="Conduct quality checks at all checkpoints",
        priority=TaskPriority.MEDIUM,
        frequency="per shift",
    ))
    tasks.append(PriorityTask(
        type="safety",
        description="Perform safety briefings and equipment checks",
        priority=TaskPriority.HIGH,
        frequency="per shift",
    ))
    return tasks
