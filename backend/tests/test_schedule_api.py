"""
Tests for the production schedule HTTP API.
"""
import pytest

from api import app
from planning.api import get_production_scheduler
from planning.production_scheduler import ProductionScheduler
from conftest import FailingHistorySource, StaticWorkloadSource


class TestA1_Generate:
    """A1: POST /production-schedule/generate"""

    def test_generate_from_history(self, test_client, seeded_db, today):
        response = test_client.post("/production-schedule/generate", json={
            "start_date": today.isoformat(),
            "days": 3,
            "demand_forecast": {today.isoformat(): {"L1-DS": 80}},
        })

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert list(data["schedule"].keys()) == [
            "2025-03-05", "2025-03-06", "2025-03-07",
        ]

        first_day = data["schedule"]["2025-03-05"]
        assert first_day["total_demand"] == 80
        assert first_day["allocated_demand"] == 80
        plan = first_day["shifts"]["DS"][0]
        assert plan["line_shift"] == "L1-DS"
        assert plan["adjusted_capacity"] == 91
        assert first_day["shifts"]["NS"][0]["adjusted_capacity"] == 201
        assert data["summary"]["total_days"] == 3

    def test_generate_without_history(self, test_client, today):
        response = test_client.post("/production-schedule/generate", json={"start_date": today.isoformat()})

        assert response.status_code == 200
        data = response.json()
        assert data["days"] == 7
        assert data["summary"]["total_capacity"] == 0

    @pytest.mark.parametrize("days", [0, 31])
    def test_days_out_of_range(self, test_client, days):
        response = test_client.post("/production-schedule/generate", json={"days": days})
        assert response.status_code == 422

    def test_negative_demand_rejected(self, test_client, today):
        response = test_client.post("/production-schedule/generate", json={
            "start_date": today.isoformat(),
            "demand_forecast": {today.isoformat(): {"L1-DS": -5}},
        })
        assert response.status_code == 422

    @pytest.mark.parametrize("units", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_demand_rejected(self, test_client, today, units):
        response = test_client.post("/production-schedule/generate", json={
            "start_date": today.isoformat(),
            "demand_forecast": {today.isoformat(): {"L1-DS": units}},
        })
        assert response.status_code == 422

    def test_data_failure_is_503(self, test_client, today):
        app.dependency_overrides[get_production_scheduler] = lambda: ProductionScheduler(
            FailingHistorySource(), StaticWorkloadSource()
        )
        response = test_client.post("/production-schedule/generate", json={"start_date": today.isoformat()})

        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "schedule_data_unavailable"


class TestA2_SaveAndList:
    """A2: POST /save and GET /active"""

    def test_save_then_list(self, test_client, seeded_db, today):
        generated = test_client.post("/production-schedule/generate", json={
            "start_date": today.isoformat(), "days": 2,
        }).json()

        saved = test_client.post("/production-schedule/save", json={
            "schedule_data": generated, "created_by": "Production Manager",
        })
        assert saved.status_code == 200
        assert saved.json()["rows_saved"] == 4

        active = test_client.get("/production-schedule/active", params={"days": 7})
        assert active.status_code == 200
        body = active.json()
        assert body["count"] == 4
        assert body["schedules"][0]["production_line"] == "L1-DS"
        assert body["schedules"][0]["created_by"] == "Production Manager"
        assert body["schedules"][0]["capacity_units"] == 91

    def test_malformed_schedule_is_400(self, test_client):
        response = test_client.post("/production-schedule/save", json={
            "schedule_data": {"schedule": {"x": {"date": "not-a-date", "shifts": {}}}},
        })
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_schedule"

    @pytest.mark.parametrize("schedule", [[1, 2], {"2025-03-05": [1]}, "2025-03-05"])
    def test_wrongly_shaped_schedule_is_400(self, test_client, schedule):
        response = test_client.post("/production-schedule/save", json={"schedule_data": {"schedule": schedule}})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_schedule"

    def test_unknown_shift_code_is_400(self, test_client, today):
        response = test_client.post("/production-schedule/save", json={
            "schedule_data": {"schedule": {today.isoformat(): {"date": today.isoformat(), "shifts": {"XS": []}}}},
        })
        assert response.status_code == 400

    def test_active_empty(self, test_client):
        response = test_client.get("/production-schedule/active")
        assert response.status_code == 200
        assert response.json()["schedules"] == []

    def test_active_days_validated(self, test_client):
        assert test_client.get("/production-schedule/active", params={"days": 0}).status_code == 422


class TestA3_Service:
    """A3: Health and configuration endpoints."""

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_config(self, test_client):
        data = test_client.get("/production-schedule/config").json()
        assert data["capacity_buffer"] == pytest.approx(1.10)
        assert data["maintenance_factor"] == pytest.approx(0.70)
        assert data["weekend_days"] == [6, 7]
