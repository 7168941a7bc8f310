"""Tests for suggested focus targets."""

from fuel_onboard.models.session import ActivityLevel, Sex
from fuel_onboard.rules.nutrients import TARGET_LIMITS, suggest_focus_targets


class TestSuggestFocusTargets:
    """Tests for nutrient and water suggestions."""

    def test_moderate_male(self):
        """Test a moderately active man heading to 170 lb."""
        targets = suggest_focus_targets(170, 180, Sex.MALE, ActivityLevel.MODERATE)
        assert targets.protein_g_min == 130
        assert targets.fiber_g_min == 30
        assert targets.carbs_g_max == 170
        assert targets.sugar_g_max == 40
        assert targets.sodium_mg_max == 2300
        assert targets.water_ml == 2700

    def test_sedentary_female_clamped_to_minimums(self):
        """Test small values are raised to the slider minimums."""
        targets = suggest_focus_targets(120, 120, Sex.FEMALE, ActivityLevel.SEDENTARY)
        assert targets.protein_g_min == 80
        assert targets.fiber_g_min == 25
        assert targets.carbs_g_max == 130
        assert targets.water_ml == 1800

    def test_high_activity_heavy_goal(self):
        """Test heavy goals and high activity add fiber, sodium and carbs."""
        targets = suggest_focus_targets(200, 220, "male", "high")
        assert targets.fiber_g_min == 38
        assert targets.sodium_mg_max == 2600
        assert targets.carbs_g_max == 220
        assert targets.protein_g_min == 170

    def test_unknown_sex_uses_middle_fiber(self):
        """Test an unrecognised sex gets the middle fiber value."""
        targets = suggest_focus_targets(150, 150, "", ActivityLevel.LIGHT)
        assert targets.fiber_g_min == 28

    def test_always_within_limits(self):
        """Test every value sits on a slider step inside its range."""
        for activity in ActivityLevel:
            for weight in (90, 150, 250, 400, 600):
                data = suggest_focus_targets(weight, weight, Sex.MALE, activity).to_dict()
                for name, value in data.items():
                    low, high, step = TARGET_LIMITS[name]
                    assert low <= value <= high
                    assert value % step == 0
