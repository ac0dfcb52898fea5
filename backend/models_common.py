"""
ShiftPlan - Common Models
=========================

Reusable Pydantic models for schedule KPIs and API envelopes.
Shared by the HTTP routers so that responses stay consistent.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════════════════════════════
# SCHEDULE KPIS
# ═══════════════════════════════════════════════════════════════════════════════

class EfficiencyImprovementModel(BaseModel):
    """Efficiency gap of one shift plan."""
    line: str = Field(..., description="Line/shift identifier")
    current: float = Field(..., description="Current efficiency baseline (%)")
    target: float = Field(..., description="Efficiency target (%)")
    improvement: float = Field(..., description="Target minus current (percentage points)")


class ScheduleKPIs(BaseModel):
    """
    Aggregate KPIs of a generated schedule.

    Standard shop-floor figures used to judge a multi-day shift plan.
    """
    total_days: int = Field(
        default=0,
        description="Number of planned dates"
    )
    total_capacity: int = Field(
        default=0,
        description="Sum of adjusted capacity over all dates (units)"
    )
    total_allocated: float = Field(
        default=0.0,
        description="Demand that fits into capacity, summed over all dates (units)"
    )
    utilization_rate: float = Field(
        default=0.0,
        ge=0.0,
        description="total_allocated / total_capacity × 100"
    )
    constraint_count: int = Field(
        default=0,
        description="Active constraints summed over all shift plans"
    )
    high_risk_shifts: int = Field(
        default=0,
        description="Shift plans carrying at least one risk factor"
    )
    efficiency_improvements: List[EfficiencyImprovementModel] = Field(
        default_factory=list,
        description="Shift plans whose efficiency target exceeds the current baseline"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_days": 7,
                "total_capacity": 4480,
                "total_allocated": 3920.0,
                "utilization_rate": 87.5,
                "constraint_count": 3,
                "high_risk_shifts": 4,
                "efficiency_improvements": [
                    {"line": "L1-DS", "current": 91.8, "target": 94.5, "improvement": 2.7},
                ],
            }
        }
    )


# ═══════════════════════════════════════════════════════════════════════════════
# ENVELOPES
# ═══════════════════════════════════════════════════════════════════════════════

class HealthStatus(BaseModel):
    status: str = "ok"
    service: str = "shiftplan"
    database: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body of structured HTTP errors."""
    success: bool = False
    error: str = Field(..., description="Error category")
    detail: Optional[str] = Field(None, description="Human readable cause")
