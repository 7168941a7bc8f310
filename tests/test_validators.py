"""Tests for field and step validators."""

from datetime import timedelta

from fuel_onboard.models.session import HeightUnit, OnboardingSession, Step, Timeframe, WeightUnit
from fuel_onboard.rules.validators import (
    validate_body_fat,
    validate_calorie_target,
    validate_current_weight,
    validate_date_of_birth,
    validate_focus_modules,
    validate_goal_timeframe,
    validate_height,
    validate_preferred_name,
    validate_sex,
    validate_step,
)

from conftest import TODAY


class TestNameAndAge:
    """Tests for step 1 validators."""

    def test_name_required(self):
        """Test blank names are rejected."""
        assert validate_preferred_name("  ").i18n_key == "onboarding.name_age.error_name_required"

    def test_name_needs_two_letters(self):
        """Test a name needs at least two letters."""
        issue = validate_preferred_name("A1")
        assert issue.i18n_key == "onboarding.name_age.error_name_letters"
        assert issue.i18n_params == {"min": 2}
        assert validate_preferred_name("Jo") is None

    def test_dob_checks(self):
        """Test format, future and age bounds."""
        assert validate_date_of_birth("01/05/1994", TODAY).i18n_key.endswith("error_dob_format")
        future = (TODAY + timedelta(days=1)).isoformat()
        assert validate_date_of_birth(future, TODAY).i18n_key.endswith("error_dob_future")
        assert validate_date_of_birth("2010-01-01", TODAY).i18n_key.endswith("error_age_minimum")
        assert validate_date_of_birth("1920-01-01", TODAY).i18n_key.endswith("error_age_maximum")
        assert validate_date_of_birth("1994-05-01", TODAY) is None


class TestBodyMetrics:
    """Tests for sex, height and weight validators."""

    def test_sex_must_be_male_or_female(self):
        """Test unknown is not a selectable answer."""
        assert validate_sex("unknown") is not None
        assert validate_sex("") is not None
        assert validate_sex("female") is None

    def test_height_in_feet(self):
        """Test ft/in input is checked in centimetres."""
        session = OnboardingSession(
            profile_id=1, height_unit=HeightUnit.FT, height_ft="5", height_in="10"
        )
        assert validate_height(session) is None

    def test_height_out_of_range(self):
        """Test heights outside 120..230 cm carry the bounds."""
        session = OnboardingSession(profile_id=1, height_cm="100")
        issue = validate_height(session)
        assert issue.i18n_key == "onboarding.height.error_height_invalid"
        assert issue.i18n_params == {"minCm": 120, "maxCm": 230}

    def test_weight_bounds_in_kg(self):
        """Test kg input reports kg bounds."""
        issue = validate_current_weight("10", WeightUnit.KG)
        assert issue.i18n_key == "onboarding.current_weight.error_weight_invalid"
        assert set(issue.i18n_params) == {"minKg", "maxKg"}
        assert validate_current_weight("80", WeightUnit.KG) is None

    def test_weight_bounds_in_lb(self):
        """Test lb input reports lb bounds."""
        issue = validate_current_weight("900", WeightUnit.LB)
        assert issue.i18n_params == {"minLb": 45.0, "maxLb": 880.0}

    def test_body_fat_optional(self):
        """Test body fat may be blank but not above 80."""
        assert validate_body_fat("") is None
        assert validate_body_fat("22.5") is None
        assert validate_body_fat("85") is not None


class TestGoalAndTargets:
    """Tests for goal, calorie and module validators."""

    def test_custom_timeframe_needs_future_date(self):
        """Test a custom target date must be at least a week away."""
        soon = (TODAY + timedelta(days=3)).isoformat()
        later = (TODAY + timedelta(days=60)).isoformat()
        assert validate_goal_timeframe(Timeframe.CUSTOM_DATE, soon, TODAY) is not None
        assert validate_goal_timeframe(Timeframe.CUSTOM_DATE, later, TODAY) is None
        assert validate_goal_timeframe(Timeframe.SIX_MONTHS, "", TODAY) is None

    def test_calorie_target_floor(self):
        """Test targets under the hard floor are rejected."""
        issue = validate_calorie_target(1100, "custom")
        assert issue.i18n_key == "onboarding.calorie_target.error_below_floor"
        assert issue.i18n_params == {"floor": 1200}
        assert validate_calorie_target(None, "custom") is not None
        assert validate_calorie_target(1800, "") is not None
        assert validate_calorie_target(1800, "custom") is None

    def test_modules_exactly_two_distinct_secondaries(self):
        """Test module selection rules."""
        assert validate_focus_modules(("Water", "Exercise")) is None
        assert validate_focus_modules(("Water", "Water")) is not None
        assert validate_focus_modules(("Food", "Water")) is not None
        assert validate_focus_modules(("Water",)) is not None
        assert validate_focus_modules(("Water", "Med", "Exercise")) is not None


class TestValidateStep:
    """Tests for step-level gating."""

    def test_complete_session_passes_every_step(self, complete_session):
        """Test a fully answered session passes all step validators."""
        for step in Step:
            assert validate_step(step, complete_session, TODAY) is None, step

    def test_legal_requires_all_boxes(self, complete_session):
        """Test one unticked legal box blocks the last step."""
        session = complete_session.apply({"legal_acknowledge_risk": False})
        assert validate_step(Step.LEGAL, session, TODAY).i18n_key == "onboarding.legal.error_accept_all"

    def test_goal_weight_step_checks_direction(self, complete_session):
        """Test the goal weight step rejects a lose goal above current weight."""
        session = complete_session.apply({"goal_weight": "190"})
        issue = validate_step(Step.GOAL_WEIGHT, session, TODAY)
        assert issue.i18n_key == "onboarding.goal_weight.goal_weight_error_lose_not_lower"

    def test_custom_hard_floor(self, complete_session):
        """Test the calorie step honours a configured hard floor."""
        session = complete_session.apply({"calorie_target": 1300})
        assert validate_step(Step.CALORIE_TARGET, session, TODAY) is None
        assert validate_step(Step.CALORIE_TARGET, session, TODAY, hard_floor=1500) is not None
