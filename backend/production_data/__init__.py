"""
Production data access: shift reports, maintenance, bottlenecks and saved schedules.
"""

from .models import (
    Base,
    DailyPerformance,
    MaintenanceSchedule,
    ProductionBottleneck,
    ProductionForecast,
    SessionLocal,
    engine,
    init_db,
)

from .repository import (
    SqlHistorySource,
    SqlWorkloadSource,
    ScheduleRepository,
)

__all__ = [
    "Base", "engine", "SessionLocal", "init_db",
    "DailyPerformance", "MaintenanceSchedule", "ProductionBottleneck", "ProductionForecast",
    "SqlHistorySource", "SqlWorkloadSource", "ScheduleRepository",
]
