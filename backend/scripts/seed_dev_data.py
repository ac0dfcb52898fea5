#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    SEED DEV DATA - Development Data for ShiftPlan
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Populates the scheduling database with consistent synthetic data to:
- Demonstrate schedule generation end-to-end
- Exercise maintenance and bottleneck constraints
- Give the API something to plan against during development

Usage:
    python scripts/seed_dev_data.py                 # seed database only
    python scripts/seed_dev_data.py --check-api     # also generate a schedule via the running API

Data created:
- 30 days of daily_performance per line/shift
- Open maintenance items (one overdue, one due today, one in the future)
- Open bottlenecks (one critical)
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
from datetime import date, timedelta
from typing import Dict, List

import numpy as np
import requests

from production_data.models import (
    DailyPerformance,
    MaintenanceSchedule,
    ProductionBottleneck,
    SessionLocal,
    init_db,
)

BASE_URL = os.getenv("SHIFTPLAN_API_URL", "http://127.0.0.1:8000")
HISTORY_DAYS = 30

# line_shift -> (explicit shift or None, avg plan, avg manpower)
LINES: Dict[str, tuple] = {
    "L1-DS": ("DS", 640, 22),
    "L1-NS": ("NS", 600, 20),
    "L2-DS": (None, 480, 16),
    "L3-LS": ("LS", 360, 12),
    "ASSY NS": (None, 300, 10),
}


def log(msg: str, level: str = "INFO"):
    """Simple logging."""
    print(f"[{level}] {msg}")


def build_performance_rows(today: date, rng: np.random.Generator) -> List[DailyPerformance]:
    rows = []
    for offset in range(1, HISTORY_DAYS + 1):
        day = today - timedelta(days=offset)
        weekend = day.isoweekday() >= 6
        for line_shift, (shift, plan, mp) in LINES.items():
            completion = rng.normal(0.78 if weekend else 0.93, 0.05)
            absent = int(rng.integers(0, 3))
            ot_mp = int(rng.integers(0, 4))
            rows.append(DailyPerformance(
                date=day,
                line_shift=line_shift,
                shift=shift,
                leader=f"Leader {line_shift.split()[0].split('-')[0]}",
                mp=mp,
                absent=absent,
                plan=plan,
                no_ot_mp=mp - absent,
                ot_mp=ot_mp,
                ot_hours=float(ot_mp * 2),
                total_assy_output=max(int(plan * min(completion, 1.05)), 0),
            ))
    return rows


def build_maintenance_rows(today: date) -> List[MaintenanceSchedule]:
    return [
        MaintenanceSchedule(
            equipment_name="Conveyor drive", production_line="L1-DS",
            maintenance_type="preventive", status="overdue",
            next_maintenance=today - timedelta(days=2), estimated_duration_hours=3.5,
        ),
        MaintenanceSchedule(
            equipment_name="Torque station", production_line="L3-LS",
            maintenance_type="preventive", status="scheduled",
            next_maintenance=today, estimated_duration_hours=2.0,
        ),
        MaintenanceSchedule(
            equipment_name="Label printer", production_line="L2-DS",
            maintenance_type="predictive", status="scheduled",
            next_maintenance=today + timedelta(days=10), estimated_duration_hours=1.0,
        ),
    ]


def build_bottleneck_rows(today: date) -> List[ProductionBottleneck]:
    return [
        ProductionBottleneck(
            bottleneck_type="equipment", affected_production_line="L1-NS",
            bottleneck_description="Press cycle time drift", impact_level="critical",
            detected_date=today - timedelta(days=1), resolution_status="in_progress",
        ),
        ProductionBottleneck(
            bottleneck_type="material", affected_production_line="ASSY NS",
            bottleneck_description="Late harness delivery", impact_level="medium",
            detected_date=today, resolution_status="pending",
        ),
    ]


def seed_database(seed: int = 42) -> int:
    """Insert synthetic data if the performance table is empty. Returns rows inserted."""
    init_db()
    today = date.today()
    rng = np.random.default_rng(seed)

    session = SessionLocal()
    try:
        if session.query(DailyPerformance).count() > 0:
            log("daily_performance already populated; skipping", "WARN")
            return 0

        rows = (
            build_performance_rows(today, rng)
            + build_maintenance_rows(today)
            + build_bottleneck_rows(today)
        )
        session.add_all(rows)
        session.commit()
        return len(rows)
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_api() -> bool:
    """Generate a one-week schedule through the running backend."""
    try:
        resp = requests.post(f"{BASE_URL}/production-schedule/generate", json={"days": 7}, timeout=30)
    except requests.RequestException as e:
        log(f"Backend not reachable at {BASE_URL}: {e}", "ERROR")
        return False

    if resp.status_code != 200:
        log(f"HTTP {resp.status_code}: {resp.text[:200]}", "ERROR")
        return False

    summary = resp.json()["summary"]
    log(f"  ✅ Schedule generated: capacity={summary['total_capacity']}, "
        f"utilization={summary['utilization_rate']:.1f}%")
    return True


def main():
    """Main seed function."""
    parser = argparse.ArgumentParser(description="Seed ShiftPlan development data")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--check-api", action="store_true", help="Generate a schedule via the API afterwards")
    args = parser.parse_args()

    print("=" * 70)
    print("  ShiftPlan - Development Data Seeding")
    print("=" * 70)
    print()

    log("Seeding database...")
    inserted = seed_database(args.seed)
    log(f"  ✅ Inserted {inserted} rows")

    if args.check_api:
        print()
        log("Checking backend...")
        if not check_api():
            sys.exit(1)

    print()
    print("=" * 70)
    log("Seeding complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
