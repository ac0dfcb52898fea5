"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    PRODUCTION DATA REPOSITORY — SQL Collaborators of the Scheduler
═══════════════════════════════════════════════════════════════════════════════════════════════════════

SQLAlchemy implementations of the scheduler's data interfaces:

    SqlHistorySource     daily_performance          → [HistoryRecord]
    SqlWorkloadSource    maintenance_schedules +
                         production_bottlenecks     → WorkloadSnapshot
    ScheduleRepository   production_forecasts       ← upsert per (date, line, 'daily')

Every database failure is rolled back and re-raised as ScheduleDataError.

═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from planning.production_scheduler import (
    HistorySource,
    ScheduleDataError,
    ScheduleStore,
    WorkloadSource,
)
from planning.schedule_models import (
    BottleneckConstraint,
    HistoryRecord,
    MaintenanceConstraint,
    ScheduleResult,
    WorkloadSnapshot,
)
from planning.shift_types import parse_shift_type
from production_data.models import (
    DailyPerformance,
    MaintenanceSchedule,
    ProductionBottleneck,
    ProductionForecast,
    SessionLocal,
)

logger = logging.getLogger(__name__)

FORECAST_TYPE_DAILY = "daily"
OPEN_MAINTENANCE_STATUSES = ("scheduled", "overdue")
OPEN_BOTTLENECK_STATUSES = ("pending", "in_progress")

SessionFactory = Callable[[], Session]
TodayProvider = Callable[[], date]


class _SqlCollaborator:
    """Session factory and clock shared by the SQL collaborators."""

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        today: Optional[TodayProvider] = None,
    ):
        self.session_factory = session_factory or SessionLocal
        self.today = today or date.today


# ═══════════════════════════════════════════════════════════════════════════════
# HISTORY
# ═══════════════════════════════════════════════════════════════════════════════

def _row_to_record(row: DailyPerformance) -> HistoryRecord:
    try:
        shift_type = parse_shift_type(row.shift)
    except ValueError as e:
        raise ScheduleDataError(f"daily_performance row {row.id}: {e}") from e

    return HistoryRecord(
        date=row.date,
        line_id=row.line_shift,
        plan=float(row.plan or 0),
        actual_output=float(row.total_assy_output or 0),
        manpower=float(row.mp or 0),
        absent=float(row.absent or 0),
        no_ot_manpower=float(row.no_ot_mp or 0),
        ot_manpower=float(row.ot_mp or 0),
        ot_hours=float(row.ot_hours or 0),
        shift_type=shift_type,
    )


class SqlHistorySource(_SqlCollaborator, HistorySource):

    def fetch_history(self, lookback_days: int) -> List[HistoryRecord]:
        since = self.today() - timedelta(days=lookback_days)
        db = self.session_factory()
        try:
            rows = (
                db.query(DailyPerformance)
                .filter(DailyPerformance.date >= since)
                .order_by(DailyPerformance.date.desc(), DailyPerformance.line_shift)
                .all()
            )
            records = [_row_to_record(row) for row in rows]
        except SQLAlchemyError as e:
            logger.exception("Failed to read daily performance history")
            raise ScheduleDataError(f"Failed to read daily performance history: {e}") from e
        finally:
            db.close()

        logger.info(f"Loaded {len(records)} performance records since {since}")
        return records


# ═══════════════════════════════════════════════════════════════════════════════
# WORKLOAD
# ═══════════════════════════════════════════════════════════════════════════════

class SqlWorkloadSource(_SqlCollaborator, WorkloadSource):
    """
    Open maintenance and bottlenecks grouped by production line.

    A maintenance item counts as pending when it is scheduled and due on or
    before today, or when it is marked overdue regardless of its
    next_maintenance date (an overdue item with a future date still
    counts). Hours are summed over every open item.
    """

    def _maintenance(self, db: Session) -> List[MaintenanceConstraint]:
        today = self.today()
        is_pending = or_(
            MaintenanceSchedule.status == "overdue",
            (MaintenanceSchedule.status == "scheduled") & (MaintenanceSchedule.next_maintenance <= today),
        )
        rows = (
            db.query(
                MaintenanceSchedule.production_line,
                func.sum(case((is_pending, 1), else_=0)).label("pending_count"),
                func.sum(MaintenanceSchedule.estimated_duration_hours).label("total_hours"),
            )
            .filter(MaintenanceSchedule.status.in_(OPEN_MAINTENANCE_STATUSES))
            .filter(MaintenanceSchedule.production_line.isnot(None))
            .group_by(MaintenanceSchedule.production_line)
            .order_by(MaintenanceSchedule.production_line)
            .all()
        )
        return [
            MaintenanceConstraint(
                line_id=row.production_line,
                pending_count=int(row.pending_count or 0),
                total_hours=float(row.total_hours or 0.0),
            )
            for row in rows
        ]

    def _bottlenecks(self, db: Session) -> List[BottleneckConstraint]:
        line = ProductionBottleneck.affected_production_line
        rows = (
            db.query(
                line.label("production_line"),
                func.count(ProductionBottleneck.id).label("bottleneck_count"),
                func.sum(case((ProductionBottleneck.impact_level == "critical", 1), else_=0)).label("critical_count"),
            )
            .filter(ProductionBottleneck.resolution_status.in_(OPEN_BOTTLENECK_STATUSES))
            .filter(line.isnot(None))
            .group_by(line)
            .order_by(line)
            .all()
        )
        return [
            BottleneckConstraint(
                line_id=row.production_line,
                bottleneck_count=int(row.bottleneck_count or 0),
                critical_count=int(row.critical_count or 0),
            )
            for row in rows
        ]

    def fetch_workload(self) -> WorkloadSnapshot:
        db = self.session_factory()
        try:
            snapshot = WorkloadSnapshot(
                maintenance=self._maintenance(db),
                bottlenecks=self._bottlenecks(db),
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to read current workload")
            raise ScheduleDataError(f"Failed to read current workload: {e}") from e
        finally:
            db.close()

        logger.info(
            f"Workload: {len(snapshot.maintenance)} lines with open maintenance, "
            f"{len(snapshot.bottlenecks)} lines with open bottlenecks"
        )
        return snapshot


# ═══════════════════════════════════════════════════════════════════════════════
# SAVED SCHEDULES
# ═══════════════════════════════════════════════════════════════════════════════

def _forecast_to_dict(row: ProductionForecast) -> Dict[str, Any]:
    return {
        "forecast_date": row.forecast_date.isoformat(),
        "production_line": row.production_line,
        "shift": row.shift,
        "capacity_units": row.capacity_units,
        "manpower_required": row.manpower_required,
        "target_efficiency": row.target_efficiency,
        "constraints": row.constraints or [],
        "priority_tasks": row.priority_tasks or [],
        "risk_factors": row.risk_factors or [],
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "created_by": row.created_by,
    }


class ScheduleRepository(_SqlCollaborator, ScheduleStore):

    def save_schedule(self, result: ScheduleResult, created_by: str) -> int:
        """
        Upsert one production_forecasts row per (date, line).

        All rows are written in a single transaction; on failure nothing is
        kept and ScheduleDataError is raised.
        """
        db = self.session_factory()
        written = 0
        try:
            for day in result.iter_days():
                for plan in day.iter_plans():
                    values = {
                        "shift": plan.shift_type.value,
                        "capacity_units": plan.planned_output,
                        "manpower_required": plan.recommended_manpower,
                        "target_efficiency": plan.efficiency_target,
                        "constraints": list(plan.constraints),
                        "priority_tasks": [t.to_dict() for t in plan.priority_tasks],
                        "risk_factors": [r.to_dict() for r in plan.risk_factors],
                    }
                    existing = (
                        db.query(ProductionForecast)
                        .filter_by(
                            forecast_date=day.date,
                            production_line=plan.line_id,
                            forecast_type=FORECAST_TYPE_DAILY,
                        )
                        .one_or_none()
                    )
                    if existing is not None:
                        for key, value in values.items():
                            setattr(existing, key, value)
                    else:
                        db.add(ProductionForecast(
                            forecast_date=day.date,
                            production_line=plan.line_id,
                            forecast_type=FORECAST_TYPE_DAILY,
                            created_by=created_by,
                            **values,
                        ))
                        # Later lookups in the same transaction must see this row
                        db.flush()
                    written += 1
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Failed to save schedule")
            raise ScheduleDataError(f"Failed to save schedule: {e}") from e
        finally:
            db.close()

        return written

    def get_active_schedules(self, days: int) -> List[Dict[str, Any]]:
        today = self.today()
        until = today + timedelta(days=days)
        db = self.session_factory()
        try:
            rows = (
                db.query(ProductionForecast)
                .filter(ProductionForecast.forecast_type == FORECAST_TYPE_DAILY)
                .filter(ProductionForecast.forecast_date >= today)
                .filter(ProductionForecast.forecast_date <= until)
                .order_by(ProductionForecast.forecast_date, ProductionForecast.production_line)
                .all()
            )
            return [_forecast_to_dict(row) for row in rows]
        except SQLAlchemyError as e:
            logger.exception("Failed to read active schedules")
            raise ScheduleDataError(f"Failed to read active schedules: {e}") from e
        finally:
            db.close()
