"""Tests for goal weight bounds and suggestions."""

import pytest

from fuel_onboard.models.session import GoalType, Sex, WeightUnit
from fuel_onboard.rules.goal_weight import (
    get_goal_weight_range,
    get_suggested_target_weight_lb,
    validate_goal_weight,
)

from conftest import TODAY

PREFIX = "onboarding.goal_weight."


def _key(outcome) -> str:
    return outcome.i18n_key.removeprefix(PREFIX)


class TestValidateLose:
    """Tests for lose goals at 180 lb."""

    @pytest.mark.parametrize("target", ["180", "200"])
    def test_not_lower_rejected(self, target):
        """Test a lose target at or above current weight."""
        outcome = validate_goal_weight(180, GoalType.LOSE, WeightUnit.LB, target)
        assert not outcome.ok
        assert _key(outcome) == "goal_weight_error_lose_not_lower"

    def test_ten_percent_below_accepted(self):
        """Test 10% below current is accepted."""
        outcome = validate_goal_weight(180, GoalType.LOSE, WeightUnit.LB, "162")
        assert outcome.ok
        assert outcome.target_lb == 162.0

    def test_minimum_delta(self):
        """Test targets within 1 lb of current are too small a change."""
        outcome = validate_goal_weight(180, GoalType.LOSE, WeightUnit.LB, "179.5")
        assert _key(outcome) == "goal_weight_error_lose_min_delta"
        assert outcome.i18n_params == {"minDelta": 1}

    def test_too_aggressive(self):
        """Test more than 35% below current is rejected."""
        outcome = validate_goal_weight(180, GoalType.LOSE, WeightUnit.LB, "100")
        assert _key(outcome) == "goal_weight_error_lose_too_aggressive"


class TestValidateOther:
    """Tests for gain, maintain and input errors."""

    def test_invalid_number(self):
        """Test non-numeric input."""
        outcome = validate_goal_weight(180, GoalType.LOSE, WeightUnit.LB, "abc")
        assert _key(outcome) == "goal_weight_error_invalid_number"
        outcome = validate_goal_weight(180, GoalType.LOSE, WeightUnit.LB, None)
        assert _key(outcome) == "goal_weight_error_invalid_number"

    def test_storage_range(self):
        """Test targets outside the storable range report it in the display unit."""
        outcome = validate_goal_weight(180, GoalType.GAIN, WeightUnit.LB, "900")
        assert _key(outcome) == "goal_weight_error_range_lb"
        outcome = validate_goal_weight(180, GoalType.LOSE, WeightUnit.KG, "10")
        assert _key(outcome) == "goal_weight_error_range_kg"

    def test_gain(self):
        """Test gain direction, minimum delta and ceiling."""
        assert validate_goal_weight(180, GoalType.GAIN, WeightUnit.LB, "190").ok
        assert _key(validate_goal_weight(180, GoalType.GAIN, WeightUnit.LB, "170")) == (
            "goal_weight_error_gain_not_higher"
        )
        assert _key(validate_goal_weight(180, GoalType.GAIN, WeightUnit.LB, "180.5")) == (
            "goal_weight_error_gain_min_delta"
        )
        assert _key(validate_goal_weight(180, GoalType.GAIN, WeightUnit.LB, "250")) == (
            "goal_weight_error_gain_too_aggressive"
        )

    def test_maintain_band(self):
        """Test maintain targets must stay within 2% (capped at 5 lb)."""
        assert validate_goal_weight(180, GoalType.MAINTAIN, WeightUnit.LB, "183").ok
        outcome = validate_goal_weight(180, GoalType.MAINTAIN, WeightUnit.LB, "185")
        assert _key(outcome) == "goal_weight_error_maintain_range_lb"
        assert outcome.i18n_params == {"delta": 3.6}

    def test_recomp_band_capped(self):
        """Test the band is capped at 5 lb for heavy users."""
        bounds = get_goal_weight_range(400, GoalType.RECOMP)
        assert bounds.min_lb == 395
        assert bounds.max_lb == 405

    def test_kg_input(self):
        """Test kilogram input is compared in pounds."""
        outcome = validate_goal_weight(180, GoalType.LOSE, WeightUnit.KG, "77")
        assert outcome.ok
        assert outcome.target_lb == 169.8


class TestSuggestion:
    """Tests for the suggested goal weight."""

    def test_lose_suggestion_passes_validation(self):
        """Test the suggestion is 5% down and validates."""
        outcome = get_suggested_target_weight_lb(
            GoalType.LOSE, 200, 175, Sex.MALE, "1990-01-01", TODAY
        )
        assert outcome.ok
        assert outcome.suggested_lb == pytest.approx(190)
        assert outcome.was_clamped is False
        assert validate_goal_weight(200, GoalType.LOSE, WeightUnit.LB, outcome.suggested_lb).ok

    def test_clamped_to_bmi_floor(self):
        """Test a lean user's suggestion is held at the BMI guardrail."""
        outcome = get_suggested_target_weight_lb(
            GoalType.LOSE, 140, 180, "male", "1996-01-01", TODAY
        )
        assert outcome.ok
        assert outcome.was_clamped is True
        assert outcome.suggested_lb > 140 * 0.95
        assert validate_goal_weight(140, GoalType.LOSE, WeightUnit.LB, outcome.suggested_lb).ok

    def test_gain_suggestion(self):
        """Test gain suggestions go 4% up."""
        outcome = get_suggested_target_weight_lb(
            GoalType.GAIN, 150, 180, Sex.FEMALE, "1990-01-01", TODAY
        )
        assert outcome.suggested_lb == pytest.approx(156)

    def test_maintain_suggests_current(self):
        """Test maintain needs no body metrics."""
        outcome = get_suggested_target_weight_lb(GoalType.MAINTAIN, 180, None, None, None, TODAY)
        assert outcome.suggested_lb == 180

    def test_unavailable_without_metrics(self):
        """Test lose suggestions need height, sex and date of birth."""
        outcome = get_suggested_target_weight_lb(GoalType.LOSE, 180, None, Sex.MALE, "1990-01-01", TODAY)
        assert not outcome.ok
        assert _key(outcome) == "suggestion_unavailable"

    def test_unavailable_when_infeasible(self):
        """Test no suggestion when the guardrails leave no window."""
        outcome = get_suggested_target_weight_lb(GoalType.LOSE, 120, 185, Sex.MALE, "1990-01-01", TODAY)
        assert _key(outcome) == "suggestion_unavailable"
