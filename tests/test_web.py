"""Tests for the HTTP API."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from fuel_onboard.db.repositories import ProfileRepository
from fuel_onboard.web import create_app


@pytest.fixture
def client(temp_db_path):
    with TestClient(create_app(temp_db_path)) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        """Test the health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCalorieTarget:
    """Tests for POST /onboarding/calorie-target."""

    def test_reference_case(self, client):
        """Test the default lose pace for the reference man."""
        response = client.post(
            "/onboarding/calorie-target",
            json={
                "weight_kg": 70,
                "height_cm": 175,
                "age_years": 30,
                "sex": "male",
                "activity_level": "moderate",
                "goal_type": "lose",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["bmr"] == 1649
        assert data["maintenance_calories"] == 2556
        assert data["target_calories"] == 2306
        assert data["hard_floor_applied"] is False

    def test_hard_floor(self, client):
        """Test an aggressive deadline is pinned to the hard floor."""
        response = client.post(
            "/onboarding/calorie-target",
            json={
                "weight_kg": 55,
                "height_cm": 160,
                "age_years": 40,
                "sex": "female",
                "activity_level": "sedentary",
                "goal_type": "lose",
                "goal_weight_kg": 45,
                "weeks_to_goal": 4,
            },
        )
        data = response.json()
        assert data["target_calories"] == 1200
        assert data["hard_floor_applied"] is True

    def test_rejects_bad_body(self, client):
        """Test request validation."""
        response = client.post("/onboarding/calorie-target", json={"weight_kg": -1})
        assert response.status_code == 422


class TestGoalWeight:
    """Tests for the goal weight endpoints."""

    def test_validate_rejects_with_key(self, client):
        """Test failures come back as a translation key."""
        response = client.post(
            "/onboarding/goal-weight/validate",
            json={"current_weight_lb": 180, "goal_type": "lose", "target": "180"},
        )
        assert response.status_code == 422
        data = response.json()
        assert data["ok"] is False
        assert data["i18n_key"] == "onboarding.goal_weight.goal_weight_error_lose_not_lower"

    def test_validate_accepts(self, client):
        """Test an accepted target returns pounds."""
        response = client.post(
            "/onboarding/goal-weight/validate",
            json={"current_weight_lb": 180, "goal_type": "lose", "weight_unit": "kg", "target": "77"},
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True, "target_lb": 169.8}

    def test_suggest_unavailable(self, client):
        """Test a suggestion without height is unavailable."""
        response = client.post(
            "/onboarding/goal-weight/suggest",
            json={"current_weight_lb": 180, "goal_type": "lose", "sex": "male"},
        )
        assert response.json()["i18n_key"] == "onboarding.goal_weight.suggestion_unavailable"

    def test_suggest(self, client):
        """Test a feasible suggestion."""
        response = client.post(
            "/onboarding/goal-weight/suggest",
            json={
                "current_weight_lb": 200,
                "goal_type": "lose",
                "height_cm": 175,
                "sex": "male",
                "date_of_birth": "1990-01-01",
            },
        )
        data = response.json()
        assert data["ok"] is True
        assert data["suggested_lb"] == pytest.approx(190)


class TestFocusTargets:
    def test_focus_targets(self, client):
        """Test suggested focus targets."""
        response = client.post(
            "/onboarding/focus-targets",
            json={"current_weight_lb": 180, "goal_weight_lb": 170, "sex": "male", "activity_level": "moderate"},
        )
        assert response.status_code == 200
        assert response.json()["protein_g_min"] == 130


class TestProfiles:
    """Tests for GET /onboarding/profiles/{id}."""

    def test_missing_profile(self, client):
        """Test unknown ids are 404."""
        assert client.get("/onboarding/profiles/999").status_code == 404

    def test_existing_profile(self, client, temp_db_path):
        """Test a stored profile is returned."""
        profile_id = asyncio.run(ProfileRepository(temp_db_path).create("Sam"))
        response = client.get(f"/onboarding/profiles/{profile_id}")
        assert response.status_code == 200
        assert response.json()["first_name"] == "Sam"
