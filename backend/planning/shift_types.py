"""
Shift type resolution for incoming line data.

Lines carry an explicit shift type wherever the source provides one. Legacy
sources only encode it inside the line identifier ("L1-DS", "ASSY NS"), so
the adapters fall back to a substring match on the configured tags.
"""

from __future__ import annotations

import logging
from typing import Optional

from .schedule_models import ShiftType
from .scheduler_config import SchedulerConfig, get_scheduler_config

logger = logging.getLogger(__name__)


def parse_shift_type(value: Optional[str]) -> Optional[ShiftType]:
    """Validate an explicit shift code; None for blanks."""
    if value is None:
        return None
    value = str(value).strip().upper()
    if not value:
        return None
    try:
        return ShiftType(value)
    except ValueError:
        raise ValueError(f"Unknown shift type: {value!r} (expected one of {[s.value for s in ShiftType]})")


def infer_shift_type(line_id: str, config: Optional[SchedulerConfig] = None) -> ShiftType:
    """
    Infer the shift type from a line identifier.

    Tags are tried in configured order; unmatched identifiers fall back to
    the default shift.
    """
    config = config or get_scheduler_config()
    for tag in config.shift_tags:
        if tag in line_id:
            return ShiftType(tag)

    # TODO: confirm with planning whether unmatched lines should be rejected instead of defaulted
    logger.warning(
        f"Line '{line_id}' has no shift tag {list(config.shift_tags)}; "
        f"defaulting to {config.default_shift}"
    )
    return ShiftType(config.default_shift)


def resolve_shift_type(
    line_id: str,
    explicit: Optional[str] = None,
    config: Optional[SchedulerConfig] = None,
) -> ShiftType:
    """Explicit shift type when given, otherwise inferred from the line id."""
    parsed = parse_shift_type(explicit)
    if parsed is not None:
        return parsed
    return infer_shift_type(line_id, config)
