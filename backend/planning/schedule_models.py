"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    SHIFT SCHEDULE MODELS — Domain Types
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Input records, intermediate statistics and output plans of the shift scheduling engine.

Flow:
    HistoryRecord ──► LineCapability / HistoricalCell
    WorkloadSnapshot ──► constraint factor
    ──► ShiftPlan ──► DaySchedule ──► ScheduleResult

Invariants (per ShiftPlan):
    0 ≤ planned_output ≤ adjusted_capacity ≤ base_capacity

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class ShiftType(str, Enum):
    """Shift codes a line can run under."""
    DS = "DS"   # Day shift
    NS = "NS"   # Night shift
    LS = "LS"   # Late shift


class TaskPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class RiskSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


def _mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be an object, got {type(value).__name__}")
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# INPUTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class HistoryRecord:
    """One day of recorded performance for one line."""
    date: date
    line_id: str
    plan: float = 0.0
    actual_output: float = 0.0
    manpower: float = 0.0
    absent: float = 0.0
    no_ot_manpower: float = 0.0
    ot_manpower: float = 0.0
    ot_hours: float = 0.0
    shift_type: Optional[ShiftType] = None

    @property
    def day_of_week(self) -> int:
        """ISO day of week (1 = Monday, 7 = Sunday)."""
        return self.date.isoweekday()


@dataclass(frozen=True)
class MaintenanceConstraint:
    """Pending maintenance aggregated per line."""
    line_id: str
    pending_count: int = 0
    total_hours: float = 0.0


@dataclass(frozen=True)
class BottleneckConstraint:
    """Unresolved bottlenecks aggregated per line."""
    line_id: str
    bottleneck_count: int = 0
    critical_count: int = 0


@dataclass(frozen=True)
class WorkloadSnapshot:
    """Current maintenance and bottleneck state, read-only for a run."""
    maintenance: List[MaintenanceConstraint] = field(default_factory=list)
    bottlenecks: List[BottleneckConstraint] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# DERIVED STATISTICS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineCapability:
    """
    Baseline capacity and manpower envelope of one line.

    Derived fields are filled by the capability profiler from the
    configured buffer and manpower ratios.
    """
    line_id: str
    shift_type: ShiftType
    avg_manpower: float
    avg_no_ot_manpower: float
    avg_daily_plan: float
    avg_actual_output: float
    sample_count: int
    efficiency_rate: float = 0.0
    capacity_per_shift: float = 0.0
    min_manpower: float = 0.0
    max_manpower: float = 0.0


@dataclass(frozen=True)
class HistoricalCell:
    """Accumulated performance of one line on one day of the week."""
    day_of_week: int
    line_id: str
    samples: int = 0
    total_efficiency: float = 0.0
    total_completion: float = 0.0
    total_absenteeism: float = 0.0
    total_output: float = 0.0
    total_plan: float = 0.0

    def _avg(self, total: float) -> float:
        return total / self.samples if self.samples > 0 else 0.0

    @property
    def avg_efficiency(self) -> float:
        return self._avg(self.total_efficiency)

    @property
    def avg_completion(self) -> float:
        return self._avg(self.total_completion)

    @property
    def avg_absenteeism(self) -> float:
        return self._avg(self.total_absenteeism)

    @property
    def avg_output(self) -> float:
        return self._avg(self.total_output)

    @property
    def avg_plan(self) -> float:
        return self._avg(self.total_plan)

    @property
    def reliability(self) -> float:
        """Average plan completion as a fraction."""
        return self.avg_completion / 100


# ═══════════════════════════════════════════════════════════════════════════════
# OUTPUTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PriorityTask:
    type: str
    description: str
    priority: TaskPriority
    estimated_time: Optional[float] = None
    impact: Optional[str] = None
    frequency: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type,
            "description": self.description,
            "priority": self.priority.value,
        }
        if self.estimated_time is not None:
            data["estimated_time"] = self.estimated_time
        if self.impact is not None:
            data["impact"] = self.impact
        if self.frequency is not None:
            data["frequency"] = self.frequency
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriorityTask":
        return cls(
            type=data["type"],
            description=data.get("description", ""),
            priority=TaskPriority(data.get("priority", TaskPriority.MEDIUM.value)),
            estimated_time=data.get("estimated_time"),
            impact=data.get("impact"),
            frequency=data.get("frequency"),
        )


@dataclass(frozen=True)
class RiskFactor:
    type: str
    description: str
    severity: RiskSeverity

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "description": self.description, "severity": self.severity.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskFactor":
        return cls(
            type=data["type"],
            description=data.get("description", ""),
            severity=RiskSeverity(data.get("severity", RiskSeverity.MEDIUM.value)),
        )


@dataclass
class ShiftPlan:
    """Planned capacity and output of one line on one date."""
    line_id: str
    shift_type: ShiftType
    base_capacity: int
    adjusted_capacity: int
    planned_output: int
    recommended_manpower: float
    efficiency_rate: float
    efficiency_target: float
    historical_factor: float = 1.0
    constraint_factor: float = 1.0
    min_manpower: float = 0.0
    max_manpower: float = 0.0
    constraints: List[str] = field(default_factory=list)
    priority_tasks: List[PriorityTask] = field(default_factory=list)
    risk_factors: List[RiskFactor] = field(default_factory=list)

    @property
    def utilization_pct(self) -> Optional[float]:
        """Planned output over adjusted capacity, None when capacity is 0."""
        if self.adjusted_capacity <= 0:
            return None
        return self.planned_output / self.adjusted_capacity * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_shift": self.line_id,
            "shift_type": self.shift_type.value,
            "base_capacity": self.base_capacity,
            "adjusted_capacity": self.adjusted_capacity,
            "planned_output": self.planned_output,
            "recommended_manpower": self.recommended_manpower,
            "min_manpower": self.min_manpower,
            "max_manpower": self.max_manpower,
            "efficiency_rate": self.efficiency_rate,
            "efficiency_target": self.efficiency_target,
            "historical_factor": self.historical_factor,
            "constraint_factor": self.constraint_factor,
            "constraints": list(self.constraints),
            "priority_tasks": [t.to_dict() for t in self.priority_tasks],
            "risk_factors": [r.to_dict() for r in self.risk_factors],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShiftPlan":
        data = _mapping(data, "shift plan")
        return cls(
            line_id=data["line_shift"],
            shift_type=ShiftType(data.get("shift_type", ShiftType.DS.value)),
            base_capacity=int(data.get("base_capacity", 0)),
            adjusted_capacity=int(data.get("adjusted_capacity", 0)),
            planned_output=int(data.get("planned_output", 0)),
            recommended_manpower=float(data.get("recommended_manpower", 0.0)),
            efficiency_rate=float(data.get("efficiency_rate", 0.0)),
            efficiency_target=float(data.get("efficiency_target", 0.0)),
            historical_factor=float(data.get("historical_factor", 1.0)),
            constraint_factor=float(data.get("constraint_factor", 1.0)),
            min_manpower=float(data.get("min_manpower", 0.0)),
            max_manpower=float(data.get("max_manpower", 0.0)),
            constraints=list(data.get("constraints", [])),
            priority_tasks=[PriorityTask.from_dict(t) for t in data.get("priority_tasks", [])],
            risk_factors=[RiskFactor.from_dict(r) for r in data.get("risk_factors", [])],
        )


def _empty_shifts() -> Dict[ShiftType, List[ShiftPlan]]:
    return {shift: [] for shift in ShiftType}


@dataclass
class DaySchedule:
    """All shift plans for one calendar date."""
    date: date
    day_of_week: int
    shifts: Dict[ShiftType, List[ShiftPlan]] = field(default_factory=_empty_shifts)
    total_capacity: int = 0
    total_demand: float = 0.0
    allocated_demand: float = 0.0

    def iter_plans(self) -> List[ShiftPlan]:
        """Shift plans in DS, NS, LS order."""
        return [plan for shift in ShiftType for plan in self.shifts.get(shift, [])]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "day_of_week": self.day_of_week,
            "shifts": {
                shift.value: [p.to_dict() for p in self.shifts.get(shift, [])]
                for shift in ShiftType
            },
            "total_capacity": self.total_capacity,
            "total_demand": self.total_demand,
            "allocated_demand": self.allocated_demand,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaySchedule":
        data = _mapping(data, "day schedule")
        shifts = _empty_shifts()
        for code, plans in _mapping(data.get("shifts") or {}, "shifts").items():
            if not isinstance(plans, list):
                raise ValueError(f"shift {code} plans must be a list")
            shifts[ShiftType(code)] = [ShiftPlan.from_dict(p) for p in plans]
        schedule_date = date.fromisoformat(str(data["date"]))
        return cls(
            date=schedule_date,
            day_of_week=int(data.get("day_of_week", schedule_date.isoweekday())),
            shifts=shifts,
            total_capacity=int(data.get("total_capacity", 0)),
            total_demand=float(data.get("total_demand", 0.0)),
            allocated_demand=float(data.get("allocated_demand", 0.0)),
        )


@dataclass(frozen=True)
class EfficiencyImprovement:
    line: str
    current: float
    target: float
    improvement: float

    def to_dict(self) -> Dict[str, Any]:
        return {"line": self.line, "current": self.current, "target": self.target, "improvement": self.improvement}


@dataclass
class ScheduleSummary:
    total_days: int = 0
    total_capacity: int = 0
    total_allocated: float = 0.0
    utilization_rate: float = 0.0
    constraint_count: int = 0
    high_risk_shifts: int = 0
    efficiency_improvements: List[EfficiencyImprovement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_days": self.total_days,
            "total_capacity": self.total_capacity,
            "total_allocated": self.total_allocated,
            "utilization_rate": self.utilization_rate,
            "constraint_count": self.constraint_count,
            "high_risk_shifts": self.high_risk_shifts,
            "efficiency_improvements": [e.to_dict() for e in self.efficiency_improvements],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleSummary":
        return cls(
            total_days=int(data.get("total_days", 0)),
            total_capacity=int(data.get("total_capacity", 0)),
            total_allocated=float(data.get("total_allocated", 0.0)),
            utilization_rate=float(data.get("utilization_rate", 0.0)),
            constraint_count=int(data.get("constraint_count", 0)),
            high_risk_shifts=int(data.get("high_risk_shifts", 0)),
            efficiency_improvements=[
                EfficiencyImprovement(**e) for e in data.get("efficiency_improvements", [])
            ],
        )


@dataclass
class ScheduleResult:
    """Result of one schedule generation run."""
    start_date: date
    days: int
    schedule: Dict[date, DaySchedule]
    summary: ScheduleSummary
    recommendations: List[str] = field(default_factory=list)

    def iter_days(self) -> List[DaySchedule]:
        return list(self.schedule.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "days": self.days,
            "schedule": {d.isoformat(): day.to_dict() for d, day in self.schedule.items()},
            "summary": self.summary.to_dict(),
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleResult":
        """Rebuild a result from its `to_dict` form (e.g. a client posting it back for saving)."""
        data = _mapping(data, "schedule data")
        days = [DaySchedule.from_dict(d) for d in _mapping(data.get("schedule") or {}, "schedule").values()]
        days.sort(key=lambda d: d.date)
        schedule = {d.date: d for d in days}
        start = data.get("start_date")
        return cls(
            start_date=date.fromisoformat(str(start)) if start else (days[0].date if days else date.today()),
            days=int(data.get("days", len(days))),
            schedule=schedule,
            summary=ScheduleSummary.from_dict(_mapping(data.get("summary") or {}, "summary")),
            recommendations=list(data.get("recommendations", [])),
        )
