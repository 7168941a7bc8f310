"""Draft accumulation: session form state to a sparse profile patch, and back."""

from ..models.profile import ProfileRecord
from ..models.session import (
    ActivityLevel,
    CaloriePlan,
    FocusModule,
    FocusTargets,
    GoalType,
    HeightUnit,
    OnboardingSession,
    Sex,
    SubscriptionPlan,
    Timeframe,
    WeightUnit,
)
from ..utils.metrics import (
    MAX_WEIGHT_LB,
    MIN_WEIGHT_LB,
    cm_to_ft_in,
    parse_iso_date,
    round_body_fat,
    round_height_cm,
    round_weight_lb,
    weight_from_lb,
)

MAX_BODY_FAT_PERCENT = 80.0

_STORED_PLAN_LABELS = {plan.stored_label: plan for plan in CaloriePlan}


def _storable_weight(weight_lb: float | None) -> float | None:
    if weight_lb is None or not MIN_WEIGHT_LB <= weight_lb <= MAX_WEIGHT_LB:
        return None
    return round_weight_lb(weight_lb)


def build_draft(session: OnboardingSession) -> dict:
    """Build the profile patch for everything the user has validly entered.

    Pure and deterministic. A key is present only when its source value
    parses; weights are always pounds to 3 decimals and heights always
    centimetres to 1 decimal, whatever the display units.
    """
    draft: dict = {}

    name = session.preferred_name.strip()
    if name:
        draft["first_name"] = name
    if parse_iso_date(session.date_of_birth):
        draft["date_of_birth"] = session.date_of_birth.strip()
    if session.sex in (Sex.MALE.value, Sex.FEMALE.value):
        draft["gender"] = session.sex

    height_cm = session.parsed_height_cm
    if height_cm is not None:
        draft["height_cm"] = round_height_cm(height_cm)
        draft["height_unit"] = session.height_unit.value

    if session.activity_level in {a.value for a in ActivityLevel}:
        draft["activity_level"] = session.activity_level

    weight_lb = _storable_weight(session.parsed_weight_lb)
    if weight_lb is not None:
        draft["weight_lb"] = weight_lb
        draft["weight_unit"] = session.weight_unit.value
    body_fat = session.parsed_body_fat
    if body_fat is not None and body_fat <= MAX_BODY_FAT_PERCENT:
        draft["body_fat_percent"] = round_body_fat(body_fat)

    if session.goal_type in {g.value for g in GoalType}:
        draft["goal_type"] = session.goal_type

    goal_lb = _storable_weight(session.parsed_goal_weight_lb)
    if goal_lb is not None:
        draft["goal_weight_lb"] = goal_lb
        draft["goal_timeframe"] = session.goal_timeframe.value
        target_date = parse_iso_date(session.goal_target_date)
        if session.goal_timeframe == Timeframe.CUSTOM_DATE and target_date:
            draft["goal_target_date"] = target_date.isoformat()

    if session.calorie_target is not None:
        draft["daily_calorie_target"] = int(session.calorie_target)
    if session.maintenance_calories is not None:
        draft["maintenance_calories"] = int(session.maintenance_calories)
    if session.calorie_plan in {p.value for p in CaloriePlan}:
        draft["calorie_plan"] = CaloriePlan(session.calorie_plan).stored_label

    if session.focus_targets is not None:
        targets = session.focus_targets
        draft["protein_g_min"] = targets.protein_g_min
        draft["fiber_g_min"] = targets.fiber_g_min
        draft["carbs_g_max"] = targets.carbs_g_max
        draft["sugar_g_max"] = targets.sugar_g_max
        draft["sodium_mg_max"] = targets.sodium_mg_max
        draft["water_goal_ml"] = targets.water_ml

    modules = list(session.focus_modules)
    if len(modules) == 2 and len(set(modules)) == 2:
        draft["focus_module_1"] = FocusModule.FOOD.value
        draft["focus_module_2"] = modules[0]
        draft["focus_module_3"] = modules[1]

    if session.plan in {p.value for p in SubscriptionPlan}:
        draft["plan"] = session.plan

    return draft


def _fmt(value: float) -> str:
    return f"{value:g}"


def resume_session(
    profile: ProfileRecord, current_step: int = 1, constrained_host: bool = False
) -> OnboardingSession:
    """Rebuild wizard form state from a stored profile.

    Used on re-entry so every step shows what was previously saved.
    """
    if profile.id is None:
        raise ValueError("Profile must have an ID to resume")

    values: dict = {
        "profile_id": profile.id,
        "current_step": current_step,
        "constrained_host": constrained_host,
        "preferred_name": profile.first_name or "",
        "date_of_birth": profile.date_of_birth or "",
        "sex": profile.gender or "",
        "activity_level": profile.activity_level or "",
        "goal_type": profile.goal_type or "",
        "calorie_target": profile.daily_calorie_target,
        "maintenance_calories": profile.maintenance_calories,
        "plan": profile.plan or "",
        "goal_target_date": profile.goal_target_date or "",
    }

    if profile.height_cm is not None:
        if profile.height_unit == HeightUnit.FT.value:
            feet, inches = cm_to_ft_in(profile.height_cm)
            values.update(height_unit=HeightUnit.FT, height_ft=str(feet), height_in=_fmt(inches))
        else:
            values.update(height_unit=HeightUnit.CM, height_cm=_fmt(profile.height_cm))

    unit = WeightUnit(profile.weight_unit) if profile.weight_unit else WeightUnit.LB
    values["weight_unit"] = unit
    if profile.weight_lb is not None:
        values["current_weight"] = _fmt(weight_from_lb(profile.weight_lb, unit.value))
    if profile.body_fat_percent is not None:
        values["body_fat_percent"] = _fmt(profile.body_fat_percent)
    if profile.goal_weight_lb is not None:
        values["goal_weight"] = _fmt(weight_from_lb(profile.goal_weight_lb, unit.value))
    if profile.goal_timeframe:
        values["goal_timeframe"] = Timeframe(profile.goal_timeframe)

    plan = _STORED_PLAN_LABELS.get(profile.calorie_plan or "")
    if plan is not None:
        values["calorie_plan"] = plan.value

    if profile.protein_g_min is not None:
        values["focus_targets"] = FocusTargets(
            protein_g_min=profile.protein_g_min,
            fiber_g_min=profile.fiber_g_min or 0,
            carbs_g_max=profile.carbs_g_max or 0,
            sugar_g_max=profile.sugar_g_max or 0,
            sodium_mg_max=profile.sodium_mg_max or 0,
            water_ml=profile.water_goal_ml or 0,
        )

    secondary = tuple(m for m in (profile.focus_module_2, profile.focus_module_3) if m)
    if secondary:
        values["focus_modules"] = secondary

    return OnboardingSession(**values)
