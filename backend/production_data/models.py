"""SQLAlchemy models for shift reporting and saved production schedules."""
from __future__ import annotations

import os
from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker

DATABASE_URL = os.getenv("SHIFTPLAN_DATABASE_URL", "sqlite:///shiftplan.db")

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None) -> None:
    Base.metadata.create_all(bind=bind or engine)


class DailyPerformance(Base):
    """One reported day of one line/shift."""
    __tablename__ = "daily_performance"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    line_shift = Column(String(50), nullable=False, index=True)
    shift = Column(String(2), nullable=True)  # DS / NS / LS when recorded explicitly
    leader = Column(String(50), nullable=True)
    mp = Column(Integer, nullable=False, default=0)
    absent = Column(Integer, default=0)
    plan = Column(Integer, nullable=False, default=0)
    no_ot_mp = Column(Integer, default=0)
    ot_mp = Column(Integer, default=0)
    ot_hours = Column(Float, default=0.0)
    total_assy_output = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class MaintenanceSchedule(Base):
    __tablename__ = "maintenance_schedules"

    id = Column(Integer, primary_key=True, index=True)
    equipment_name = Column(String(255), nullable=False)
    equipment_id = Column(String(100), nullable=True, index=True)
    production_line = Column(String(50), nullable=True, index=True)
    maintenance_type = Column(String(20), default="preventive")  # preventive/corrective/predictive/emergency
    last_maintenance = Column(Date, nullable=True)
    next_maintenance = Column(Date, nullable=True, index=True)
    estimated_duration_hours = Column(Float, nullable=True)
    priority_level = Column(String(20), default="medium")
    status = Column(String(20), default="scheduled", index=True)  # scheduled/in_progress/completed/overdue/cancelled
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ProductionBottleneck(Base):
    __tablename__ = "production_bottlenecks"

    id = Column(Integer, primary_key=True, index=True)
    bottleneck_type = Column(String(20), nullable=False)  # equipment/manpower/material/quality/schedule/process
    affected_production_line = Column(String(50), nullable=True, index=True)
    bottleneck_description = Column(Text, nullable=True)
    impact_level = Column(String(20), nullable=False, index=True)  # low/medium/high/critical
    detected_date = Column(Date, nullable=True)
    resolved_date = Column(Date, nullable=True)
    resolution_status = Column(String(20), default="pending", index=True)  # pending/in_progress/resolved/monitored
    reported_by = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ProductionForecast(Base):
    """Saved plan of one line on one date."""
    __tablename__ = "production_forecasts"
    __table_args__ = (
        UniqueConstraint("forecast_date", "production_line", "forecast_type", name="uq_forecast_date_line_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    forecast_date = Column(Date, nullable=False, index=True)
    production_line = Column(String(50), nullable=False, index=True)
    shift = Column(String(2), nullable=True)
    forecast_type = Column(String(20), nullable=False, default="daily", index=True)
    capacity_units = Column(Integer, nullable=True)
    manpower_required = Column(Float, nullable=True)
    target_efficiency = Column(Float, nullable=True)
    constraints = Column(JSON, nullable=True)
    priority_tasks = Column(JSON, nullable=True)
    risk_factors = Column(JSON, nullable=True)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
