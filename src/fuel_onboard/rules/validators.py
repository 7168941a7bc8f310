"""Per-field and per-step validation for the onboarding wizard.

Every validator returns None when the value is acceptable, or a
ValidationIssue holding a translation key and its parameters.
"""

from collections.abc import Callable
from datetime import date

from ..models.session import (
    ActivityLevel,
    CaloriePlan,
    FocusModule,
    GoalType,
    HeightUnit,
    OnboardingSession,
    Sex,
    Step,
    SubscriptionPlan,
    Timeframe,
    WeightUnit,
)
from ..utils.metrics import (
    MAX_WEIGHT_LB,
    MIN_WEIGHT_LB,
    age_from_dob,
    lb_to_kg,
    parse_iso_date,
    parse_positive_float,
    round_to,
    weight_to_lb,
)
from .calories import HARD_FLOOR_KCAL, weeks_until
from .goal_weight import validate_goal_weight
from .issue import ValidationIssue

MIN_NAME_LETTERS = 2
MIN_AGE_YEARS = 18
MAX_AGE_YEARS = 100
MIN_HEIGHT_CM = 120.0
MAX_HEIGHT_CM = 230.0
MAX_BODY_FAT_PERCENT = 80.0

SECONDARY_MODULES = (FocusModule.EXERCISE.value, FocusModule.MED.value, FocusModule.WATER.value)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_preferred_name(name: str | None) -> ValidationIssue | None:
    if _is_blank(name):
        return ValidationIssue("onboarding.name_age.error_name_required")
    if sum(1 for ch in name if ch.isalpha()) < MIN_NAME_LETTERS:
        return ValidationIssue("onboarding.name_age.error_name_letters", {"min": MIN_NAME_LETTERS})
    return None


def validate_date_of_birth(raw: str | None, today: date | None = None) -> ValidationIssue | None:
    """Date of birth must be a real past date giving an age of 18 to 100."""
    if _is_blank(raw):
        return ValidationIssue("onboarding.name_age.error_dob_required")
    dob = parse_iso_date(raw)
    if dob is None:
        return ValidationIssue("onboarding.name_age.error_dob_format")
    today = today or date.today()
    if dob > today:
        return ValidationIssue("onboarding.name_age.error_dob_future")
    age = age_from_dob(dob, today)
    if age < MIN_AGE_YEARS:
        return ValidationIssue("onboarding.name_age.error_age_minimum", {"min": MIN_AGE_YEARS})
    if age > MAX_AGE_YEARS:
        return ValidationIssue("onboarding.name_age.error_age_maximum", {"max": MAX_AGE_YEARS})
    return None


def validate_sex(sex: str | None) -> ValidationIssue | None:
    # Unknown is tolerated by the formulas but is not a wizard choice
    if sex not in (Sex.MALE.value, Sex.FEMALE.value):
        return ValidationIssue("onboarding.sex.error_select_sex")
    return None


def validate_height(session: OnboardingSession) -> ValidationIssue | None:
    """Height in whichever unit is active must land within 120..230 cm."""
    if session.height_unit == HeightUnit.FT:
        missing = _is_blank(session.height_ft)
    else:
        missing = _is_blank(session.height_cm)
    if missing:
        return ValidationIssue("onboarding.height.error_height_required")
    return validate_height_cm(session.parsed_height_cm)


def validate_height_cm(height_cm: float | None) -> ValidationIssue | None:
    if height_cm is None or not MIN_HEIGHT_CM <= height_cm <= MAX_HEIGHT_CM:
        return ValidationIssue(
            "onboarding.height.error_height_invalid",
            {"minCm": int(MIN_HEIGHT_CM), "maxCm": int(MAX_HEIGHT_CM)},
        )
    return None


def validate_activity_level(level: str | None) -> ValidationIssue | None:
    if level not in {a.value for a in ActivityLevel}:
        return ValidationIssue("onboarding.activity.error_select_activity")
    return None


def validate_current_weight(raw: str | None, unit: WeightUnit | str) -> ValidationIssue | None:
    """Weight in the display unit must fall within the storage bounds."""
    if _is_blank(raw):
        return ValidationIssue("onboarding.current_weight.error_weight_required")
    unit = WeightUnit(unit)
    value = parse_positive_float(raw)
    weight_lb = weight_to_lb(value, unit.value) if value is not None else None
    if weight_lb is None or not MIN_WEIGHT_LB <= weight_lb <= MAX_WEIGHT_LB:
        if unit == WeightUnit.KG:
            params = {
                "minKg": round_to(lb_to_kg(MIN_WEIGHT_LB), 1),
                "maxKg": round_to(lb_to_kg(MAX_WEIGHT_LB), 1),
            }
        else:
            params = {"minLb": MIN_WEIGHT_LB, "maxLb": MAX_WEIGHT_LB}
        return ValidationIssue("onboarding.current_weight.error_weight_invalid", params)
    return None


def validate_body_fat(raw: str | None) -> ValidationIssue | None:
    """Body fat is optional; when given it must be in (0, 80]."""
    if _is_blank(raw):
        return None
    value = parse_positive_float(raw)
    if value is None or value > MAX_BODY_FAT_PERCENT:
        return ValidationIssue(
            "onboarding.current_weight.error_body_fat_invalid", {"max": int(MAX_BODY_FAT_PERCENT)}
        )
    return None


def validate_goal_type(goal: str | None) -> ValidationIssue | None:
    if goal not in {g.value for g in GoalType}:
        return ValidationIssue("onboarding.goal.error_select_goal")
    return None


def validate_goal_timeframe(
    timeframe: Timeframe, target_date: str | None, today: date | None = None
) -> ValidationIssue | None:
    """A custom timeframe needs a target date at least one week away."""
    if timeframe != Timeframe.CUSTOM_DATE:
        return None
    if weeks_until(parse_iso_date(target_date), today) is None:
        return ValidationIssue("onboarding.goal_weight.error_target_date_invalid")
    return None


def validate_calorie_target(
    target: int | None, plan: str | None, hard_floor: int = HARD_FLOOR_KCAL
) -> ValidationIssue | None:
    if target is None:
        return ValidationIssue("onboarding.calorie_target.error_required")
    if target < hard_floor:
        return ValidationIssue("onboarding.calorie_target.error_below_floor", {"floor": hard_floor})
    if plan not in {p.value for p in CaloriePlan}:
        return ValidationIssue("onboarding.calorie_target.error_plan_required")
    return None


def validate_focus_targets(session: OnboardingSession) -> ValidationIssue | None:
    if session.focus_targets is None:
        return ValidationIssue("onboarding.focus_targets.error_required")
    return None


def validate_focus_modules(modules: tuple[str, ...] | list[str]) -> ValidationIssue | None:
    """Exactly two distinct secondary modules; Food is always ranked first."""
    chosen = list(modules)
    if (
        len(chosen) != 2
        or len(set(chosen)) != 2
        or any(m not in SECONDARY_MODULES for m in chosen)
    ):
        return ValidationIssue("onboarding.modules.error_select_two")
    return None


def validate_plan(plan: str | None) -> ValidationIssue | None:
    if plan not in {p.value for p in SubscriptionPlan}:
        return ValidationIssue("onboarding.plan.error_select_plan")
    return None


def validate_legal(session: OnboardingSession) -> ValidationIssue | None:
    if not session.legal_accepted:
        return ValidationIssue("onboarding.legal.error_accept_all")
    return None


def _check_name_age(session: OnboardingSession, today: date | None) -> ValidationIssue | None:
    return validate_preferred_name(session.preferred_name) or validate_date_of_birth(
        session.date_of_birth, today
    )


def _check_current_weight(session: OnboardingSession, today: date | None) -> ValidationIssue | None:
    return validate_current_weight(session.current_weight, session.weight_unit) or validate_body_fat(
        session.body_fat_percent
    )


def _check_goal_weight(session: OnboardingSession, today: date | None) -> ValidationIssue | None:
    current_lb = session.parsed_weight_lb
    if current_lb is None or validate_goal_type(session.goal_type):
        # Earlier steps own these errors; re-report them here rather than crash
        return validate_current_weight(session.current_weight, session.weight_unit) or validate_goal_type(
            session.goal_type
        )
    result = validate_goal_weight(current_lb, session.goal_type, session.weight_unit, session.goal_weight)
    if not result.ok:
        return result
    return validate_goal_timeframe(session.goal_timeframe, session.goal_target_date, today)


STEP_VALIDATORS: dict[Step, Callable[[OnboardingSession, date | None], ValidationIssue | None]] = {
    Step.NAME_AGE: _check_name_age,
    Step.SEX: lambda s, today: validate_sex(s.sex),
    Step.HEIGHT: lambda s, today: validate_height(s),
    Step.ACTIVITY: lambda s, today: validate_activity_level(s.activity_level),
    Step.CURRENT_WEIGHT: _check_current_weight,
    Step.GOAL: lambda s, today: validate_goal_type(s.goal_type),
    Step.GOAL_WEIGHT: _check_goal_weight,
    Step.CALORIE_TARGET: lambda s, today: validate_calorie_target(s.calorie_target, s.calorie_plan),
    Step.FOCUS_TARGETS: lambda s, today: validate_focus_targets(s),
    Step.MODULES: lambda s, today: validate_focus_modules(s.focus_modules),
    Step.PLAN: lambda s, today: validate_plan(s.plan),
    Step.LEGAL: lambda s, today: validate_legal(s),
}


def validate_step(
    step: int,
    session: OnboardingSession,
    today: date | None = None,
    hard_floor: int = HARD_FLOOR_KCAL,
) -> ValidationIssue | None:
    """Run the validator that gates leaving ``step``."""
    step = Step(step)
    if step == Step.CALORIE_TARGET:
        return validate_calorie_target(session.calorie_target, session.calorie_plan, hard_floor)
    check = STEP_VALIDATORS.get(step)
    return check(session, today) if check else None
