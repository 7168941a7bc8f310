"""Suggested daily focus targets (protein, fiber, carbs, sugar, sodium, water)."""

from ..models.session import ActivityLevel, FocusTargets, Sex
from ..utils.metrics import lb_to_kg

# Slider limits per nutrient: (min, max, step)
TARGET_LIMITS: dict[str, tuple[int, int, int]] = {
    "protein_g_min": (80, 250, 5),
    "fiber_g_min": (22, 45, 1),
    "carbs_g_max": (80, 300, 10),
    "sugar_g_max": (25, 70, 5),
    "sodium_mg_max": (1500, 3500, 100),
    "water_ml": (1800, 4500, 100),
}

ACTIVE_LEVELS = (ActivityLevel.HIGH, ActivityLevel.VERY_HIGH)
MID_LEVELS = (ActivityLevel.LIGHT, ActivityLevel.MODERATE)


def _fit(name: str, value: float) -> int:
    """Clamp into the slider range and snap to its step."""
    low, high, step = TARGET_LIMITS[name]
    clamped = max(low, min(high, value))
    return int(round(clamped / step) * step)


def suggest_focus_targets(
    goal_weight_lb: float,
    current_weight_lb: float,
    sex: Sex | str,
    activity_level: ActivityLevel | str,
) -> FocusTargets:
    """Suggest daily targets from weight, sex and activity level.

    Args:
        goal_weight_lb: Goal weight, drives protein and fiber
        current_weight_lb: Current weight, drives water
        sex: Sex at birth; anything unrecognised uses the middle values
        activity_level: Daily activity level

    Returns:
        FocusTargets clamped to the slider limits
    """
    activity = ActivityLevel(activity_level)
    try:
        sex = Sex(sex)
    except ValueError:
        sex = Sex.UNKNOWN

    if activity in ACTIVE_LEVELS:
        protein_per_lb = 0.85
    elif activity in MID_LEVELS:
        protein_per_lb = 0.75
    else:
        protein_per_lb = 0.6

    fiber = {Sex.MALE: 30, Sex.FEMALE: 25}.get(sex, 28)
    if goal_weight_lb > 190:
        fiber += 5
    if activity in ACTIVE_LEVELS:
        fiber += 3

    if activity == ActivityLevel.SEDENTARY:
        carbs = 130
    elif activity in MID_LEVELS:
        carbs = 170
    else:
        carbs = 220

    sodium = 2600 if activity in ACTIVE_LEVELS else 2300

    water = round(lb_to_kg(current_weight_lb) * 30)
    if activity in MID_LEVELS:
        water += 300
    elif activity in ACTIVE_LEVELS:
        water += 700

    return FocusTargets(
        protein_g_min=_fit("protein_g_min", round(goal_weight_lb * protein_per_lb)),
        fiber_g_min=_fit("fiber_g_min", fiber),
        carbs_g_max=_fit("carbs_g_max", carbs),
        sugar_g_max=_fit("sugar_g_max", 40),
        sodium_mg_max=_fit("sodium_mg_max", sodium),
        water_ml=_fit("water_ml", water),
    )
