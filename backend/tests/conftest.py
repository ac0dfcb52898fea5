"""
Shared fixtures for the backend tests.
"""
import os
import sys
import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# The app module creates its tables on import; point it at a throwaway database first
_TMP_DIR = tempfile.mkdtemp(prefix="shiftplan-tests-")
os.environ.setdefault("SHIFTPLAN_DATABASE_URL", f"sqlite:///{Path(_TMP_DIR) / 'app.db'}")

sys.path.insert(0, str(Path(__file__).parent.parent))

from api import app
from planning.api import get_production_scheduler
from planning.production_scheduler import HistorySource, ProductionScheduler, WorkloadSource
from planning.schedule_models import (
    BottleneckConstraint,
    HistoryRecord,
    LineCapability,
    MaintenanceConstraint,
    ShiftType,
    WorkloadSnapshot,
)
from planning.scheduler_config import SchedulerConfig, SchedulerSettings
from production_data.models import Base, DailyPerformance
from production_data.repository import ScheduleRepository, SqlHistorySource, SqlWorkloadSource

# Wednesday
TODAY = date(2025, 3, 5)


# ═══════════════════════════════════════════════════════════════════════════════
# IN-MEMORY COLLABORATORS
# ═══════════════════════════════════════════════════════════════════════════════

class StaticHistorySource(HistorySource):
    def __init__(self, records=None):
        self.records = list(records or [])
        self.calls = 0

    def fetch_history(self, lookback_days):
        self.calls += 1
        return list(self.records)


class StaticWorkloadSource(WorkloadSource):
    def __init__(self, snapshot=None):
        self.snapshot = snapshot or WorkloadSnapshot()

    def fetch_workload(self):
        return self.snapshot


class FailingHistorySource(HistorySource):
    def fetch_history(self, lookback_days):
        raise ConnectionError("database unreachable")


# ═══════════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def default_scheduler_config():
    """Every test starts from the built-in defaults, ignoring the environment."""
    SchedulerSettings.override(SchedulerConfig())
    yield
    SchedulerSettings.reset()


@pytest.fixture
def config():
    return SchedulerConfig()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_record():
    """Factory for history records with sensible defaults."""
    def _make(line_id="L1-DS", day=TODAY, plan=100, actual_output=90, manpower=20, absent=0,
              no_ot_manpower=20, ot_manpower=0, ot_hours=0.0, shift_type=None):
        return HistoryRecord(
            date=day,
            line_id=line_id,
            plan=plan,
            actual_output=actual_output,
            manpower=manpower,
            absent=absent,
            no_ot_manpower=no_ot_manpower,
            ot_manpower=ot_manpower,
            ot_hours=ot_hours,
            shift_type=shift_type,
        )
    return _make


@pytest.fixture
def make_line():
    """Factory for line capabilities with a fixed per-shift capacity."""
    def _make(line_id="L1-DS", capacity=100.0, efficiency_rate=90.0, avg_manpower=20.0,
              shift_type=ShiftType.DS):
        return LineCapability(
            line_id=line_id,
            shift_type=shift_type,
            avg_manpower=avg_manpower,
            avg_no_ot_manpower=avg_manpower,
            avg_daily_plan=100.0,
            avg_actual_output=capacity / 1.10,
            sample_count=4,
            efficiency_rate=efficiency_rate,
            capacity_per_shift=capacity,
            min_manpower=max(avg_manpower * 0.8, 5.0),
            max_manpower=avg_manpower * 1.2,
        )
    return _make


@pytest.fixture
def sample_history(make_record):
    """Four weeks of one DS and one NS line; Wednesdays at 90% completion."""
    records = []
    for week in range(4):
        wednesday = TODAY - timedelta(days=7 * (week + 1))
        for offset in range(5):
            day = wednesday + timedelta(days=offset - 2)
            completion = 0.9 if day.isoweekday() == 3 else 1.0
            records.append(make_record("L1-DS", day, plan=100, actual_output=100 * completion))
            records.append(make_record("L2-NS", day, plan=200, actual_output=200 * completion, manpower=30,
                                       no_ot_manpower=30))
    return records


@pytest.fixture
def critical_workload():
    return WorkloadSnapshot(
        maintenance=[],
        bottlenecks=[BottleneckConstraint(line_id="L1-DS", bottleneck_count=1, critical_count=1)],
    )


@pytest.fixture
def mixed_workload():
    return WorkloadSnapshot(
        maintenance=[MaintenanceConstraint(line_id="L1-DS", pending_count=2, total_hours=5.5)],
        bottlenecks=[BottleneckConstraint(line_id="L2-NS", bottleneck_count=3, critical_count=0)],
    )


@pytest.fixture
def in_memory_scheduler(sample_history):
    return ProductionScheduler(
        history_source=StaticHistorySource(sample_history),
        workload_source=StaticWorkloadSource(),
        config=SchedulerConfig(),
    )


@pytest.fixture
def session_factory():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def seeded_db(session_factory, today):
    """Three weeks of daily performance for L1-DS and L2-NS."""
    db = session_factory()
    try:
        for offset in range(1, 22):
            day = today - timedelta(days=offset)
            db.add(DailyPerformance(date=day, line_shift="L1-DS", mp=20, absent=1, plan=100,
                                    no_ot_mp=19, ot_mp=0, ot_hours=0.0, total_assy_output=90))
            db.add(DailyPerformance(date=day, line_shift="L2-NS", mp=30, absent=0, plan=200,
                                    no_ot_mp=30, ot_mp=2, ot_hours=2.0, total_assy_output=190))
        db.commit()
    finally:
        db.close()
    return session_factory


@pytest.fixture
def sql_scheduler(session_factory, today):
    """Scheduler wired to the SQL collaborators over the test database."""
    clock = lambda: today  # noqa: E731
    return ProductionScheduler(
        history_source=SqlHistorySource(session_factory, today=clock),
        workload_source=SqlWorkloadSource(session_factory, today=clock),
        store=ScheduleRepository(session_factory, today=clock),
        config=SchedulerConfig(),
    )


@pytest.fixture
def test_client(sql_scheduler):
    """FastAPI test client using the per-test database."""
    app.dependency_overrides[get_production_scheduler] = lambda: sql_scheduler
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
