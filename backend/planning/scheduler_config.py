"""
Shift Scheduler - Configuration
===============================

Every tunable multiplier, threshold and shift heuristic used by the
scheduling engine lives here, so deployments can tune them without touching
generation logic.

Usage:
    from planning.scheduler_config import get_scheduler_config

    config = get_scheduler_config()
    config.maintenance_factor  # 0.70

Environment overrides:
    SHIFTPLAN_MAINTENANCE_FACTOR=0.65
    SHIFTPLAN_LOOKBACK_DAYS=45
    SHIFTPLAN_SHIFT_TAGS=DS,NS,LS
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

ENV_PREFIX = "SHIFTPLAN_"


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Scheduling constants.

    Defaults reproduce the plant's historical planning rules.
    """
    # Capability profiling
    capacity_buffer: float = 1.10          # capacity_per_shift = avg output x buffer
    min_manpower_ratio: float = 0.8
    min_manpower_floor: float = 5.0
    max_manpower_ratio: float = 1.2
    lookback_days: int = 30

    # Performance formulas
    regular_shift_hours: float = 7.66

    # Constraint multipliers
    maintenance_factor: float = 0.70
    critical_bottleneck_factor: float = 0.50
    bottleneck_factor: float = 0.80

    # Historical blend: factor = reliability * weight + floor
    historical_weight: float = 0.8
    historical_floor: float = 0.2

    # Efficiency targets
    efficiency_stretch: float = 1.05
    efficiency_cap: float = 100.0
    efficiency_baseline: float = 1.02

    # Risk thresholds
    constraint_risk_threshold: float = 0.8
    constraint_high_risk_threshold: float = 0.6
    performance_risk_threshold: float = 0.85
    performance_high_risk_threshold: float = 0.75
    weekend_days: Tuple[int, ...] = (6, 7)

    # Recommendation thresholds
    low_utilization_pct: float = 70.0
    high_utilization_pct: float = 95.0
    constraint_heavy_per_shift: int = 2
    constraint_heavy_shift_limit: int = 5
    underutilized_line_pct: float = 60.0

    # Shift tags, matched in order against line identifiers
    shift_tags: Tuple[str, ...] = ("DS", "NS", "LS")
    default_shift: str = "DS"

    def __post_init__(self):
        for name in ("maintenance_factor", "critical_bottleneck_factor", "bottleneck_factor"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        if not (self.historical_weight >= 0 and self.historical_floor >= 0):
            raise ValueError("historical_weight and historical_floor must be >= 0")
        if not self.historical_weight + self.historical_floor <= 1:
            raise ValueError(
                f"historical_weight + historical_floor must be <= 1, "
                f"got {self.historical_weight} + {self.historical_floor}"
            )
        if not self.capacity_buffer > 0:
            raise ValueError(f"capacity_buffer must be > 0, got {self.capacity_buffer}")

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _coerce(raw: str, current: Any) -> Any:
    """Parse an environment string into the type of the current value."""
    if isinstance(current, bool):
        return raw.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    if isinstance(current, tuple):
        parts = [p.strip() for p in raw.split(",") if p.strip()]
        if current and isinstance(current[0], int):
            return tuple(int(p) for p in parts)
        return tuple(p.upper() for p in parts)
    return raw.upper()


def load_config_from_env(environ: Optional[Dict[str, str]] = None) -> SchedulerConfig:
    """
    Build a config from SHIFTPLAN_* environment variables.

    Unparsable or out-of-range overrides are dropped with a warning.
    """
    environ = os.environ if environ is None else environ
    config = SchedulerConfig()

    for f in fields(config):
        env_var = f"{ENV_PREFIX}{f.name.upper()}"
        value = environ.get(env_var)
        if not value:
            continue
        try:
            config = replace(config, **{f.name: _coerce(value, getattr(config, f.name))})
            logger.info(f"Scheduler config {f.name} = {value}")
        except ValueError as e:
            logger.warning(f"Invalid value for {env_var}: {value} ({e})")

    return config


class SchedulerSettings:
    """
    Singleton holder for the active scheduler configuration.

    Loaded lazily from the environment; `reset()` forces a reload.
    """

    _instance: Optional[SchedulerConfig] = None

    @classmethod
    def get_config(cls) -> SchedulerConfig:
        if cls._instance is None:
            cls._instance = load_config_from_env()
        return cls._instance

    @classmethod
    def override(cls, config: SchedulerConfig) -> None:
        """Set the active config in runtime (tests, what-if runs)."""
        cls._instance = config

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def get_scheduler_config() -> SchedulerConfig:
    """Return the active scheduler configuration."""
    return SchedulerSettings.get_config()
