"""
════════════════════════════════════════════════════════════════════════════════════════════════════
PRODUCTION SCHEDULE API - Endpoints for Multi-Day Shift Planning
════════════════════════════════════════════════════════════════════════════════════════════════════

REST API for:
- Generating shift schedules from history, live workload and demand forecast
- Saving a generated schedule (upsert per date and line)
- Listing saved schedules for the coming days
- Inspecting the active scheduler configuration
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from models_common import ErrorResponse, ScheduleKPIs
from planning.production_scheduler import ProductionScheduler, ScheduleDataError
from planning.schedule_models import ScheduleResult
from planning.scheduler_config import get_scheduler_config
from production_data.repository import ScheduleRepository, SqlHistorySource, SqlWorkloadSource

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/production-schedule", tags=["Production Schedule"])

MAX_SCHEDULE_DAYS = 30


# ═══════════════════════════════════════════════════════════════════════════════
# PYDANTIC MODELS
# ═══════════════════════════════════════════════════════════════════════════════

class GenerateScheduleRequest(BaseModel):
    """Input for schedule generation."""
    start_date: Optional[date] = Field(None, description="First date to plan (default: today)")
    days: int = Field(7, ge=1, le=MAX_SCHEDULE_DAYS, description="Number of consecutive dates")
    demand_forecast: Optional[Dict[date, Dict[str, float]]] = Field(
        None,
        description="Forecast units per date and line; dates without forecast plan at full capacity",
    )

    @field_validator("demand_forecast")
    @classmethod
    def _finite_non_negative_demand(cls, value):
        for day, by_line in (value or {}).items():
            for line, units in by_line.items():
                if not math.isfinite(units):
                    raise ValueError(f"Demand for {line} on {day} must be a finite number: {units}")
                if units < 0:
                    raise ValueError(f"Negative demand for {line} on {day}: {units}")
        return value


class GenerateScheduleResponse(BaseModel):
    success: bool = True
    start_date: date
    days: int
    schedule: Dict[str, Any]
    summary: ScheduleKPIs
    recommendations: List[str]


class SaveScheduleRequest(BaseModel):
    """A previously generated schedule posted back for saving."""
    schedule_data: Dict[str, Any] = Field(..., description="Body of a /generate response")
    created_by: str = Field("System", min_length=1, max_length=100)


class SaveScheduleResponse(BaseModel):
    success: bool = True
    message: str
    rows_saved: int


class ActiveSchedulesResponse(BaseModel):
    success: bool = True
    days: int
    count: int
    schedules: List[Dict[str, Any]]


# ═══════════════════════════════════════════════════════════════════════════════
# DEPENDENCIES
# ═══════════════════════════════════════════════════════════════════════════════

def get_production_scheduler() -> ProductionScheduler:
    """Scheduler wired to the SQL store."""
    return ProductionScheduler(
        history_source=SqlHistorySource(),
        workload_source=SqlWorkloadSource(),
        store=ScheduleRepository(),
    )


def _data_error(e: ScheduleDataError) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail=ErrorResponse(error="schedule_data_unavailable", detail=str(e)).model_dump(),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════════

@router.post(
    "/generate",
    response_model=GenerateScheduleResponse,
    responses={503: {"model": ErrorResponse}},
)
def generate_schedule(
    request: GenerateScheduleRequest,
    scheduler: ProductionScheduler = Depends(get_production_scheduler),
):
    """Generate a shift schedule for `days` dates starting at `start_date`."""
    start = request.start_date or date.today()
    try:
        result = scheduler.generate_schedule(start, request.days, request.demand_forecast)
    except ScheduleDataError as e:
        raise _data_error(e)
    return result.to_dict()


@router.post(
    "/save",
    response_model=SaveScheduleResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def save_schedule(
    request: SaveScheduleRequest,
    scheduler: ProductionScheduler = Depends(get_production_scheduler),
):
    """Save a generated schedule; existing plans for the same date and line are replaced."""
    try:
        result = ScheduleResult.from_dict(request.schedule_data)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Rejected malformed schedule payload: {e}")
        raise HTTPException(
            status_code=400,
            detail=ErrorResponse(error="invalid_schedule", detail=str(e)).model_dump(),
        )

    try:
        rows = scheduler.save_schedule(result, created_by=request.created_by)
    except ScheduleDataError as e:
        raise _data_error(e)

    return SaveScheduleResponse(message="Schedule saved successfully", rows_saved=rows)


@router.get(
    "/active",
    response_model=ActiveSchedulesResponse,
    responses={503: {"model": ErrorResponse}},
)
def get_active_schedules(
    days: int = Query(7, ge=1, le=365, description="Look-ahead window in days"),
    scheduler: ProductionScheduler = Depends(get_production_scheduler),
):
    """Saved shift plans from today through today + days."""
    try:
        schedules = scheduler.get_active_schedules(days)
    except ScheduleDataError as e:
        raise _data_error(e)
    return ActiveSchedulesResponse(days=days, count=len(schedules), schedules=schedules)


@router.get("/config")
def get_config() -> Dict[str, Any]:
    """Active scheduler configuration."""
    return get_scheduler_config().to_dict()
