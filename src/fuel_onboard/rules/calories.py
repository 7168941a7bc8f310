"""Energy expenditure and daily calorie target policy.

BMR uses the Mifflin-St Jeor equation, TDEE scales it by an activity
multiplier, and the daily target is the TDEE plus the deficit or surplus
needed to reach the goal weight in time. Targets are clamped in two tiers:

- below the absolute hard floor the request is rejected and the target is
  pinned to the hard floor;
- between the hard floor and the sex-specific soft floor the target is
  raised to the soft floor and a warning is attached, without blocking.
"""

import math
from dataclasses import dataclass
from datetime import date

from ..models.session import ActivityLevel, CaloriePlan, GoalType, OnboardingSession, Sex, Timeframe
from ..utils.metrics import age_from_dob, lb_to_kg, parse_iso_date

# Ordered from least to most active
ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.HIGH: 1.725,
    ActivityLevel.VERY_HIGH: 1.9,
}

# Mifflin-St Jeor sex constant; unknown uses the midpoint
SEX_CONSTANTS: dict[Sex, float] = {
    Sex.MALE: 5.0,
    Sex.FEMALE: -161.0,
    Sex.UNKNOWN: -78.0,
}

KCAL_PER_KG = 7700.0
DAYS_PER_WEEK = 7

# Mild pace used when the user picked no target date
DEFAULT_DAILY_DIFF = 250
# Faster pace offered as the accelerated plan
ACCELERATED_DAILY_DIFF = 500

HARD_FLOOR_KCAL = 1200
SOFT_FLOOR_KCAL: dict[Sex, int] = {
    Sex.MALE: 1400,
    Sex.FEMALE: 1300,
    Sex.UNKNOWN: 1400,
}


@dataclass(frozen=True)
class CalorieTargetResult:
    """Outcome of the safety clamp."""

    target_calories: int
    adjusted_daily_diff: int
    warning_message: str | None = None
    hard_floor_applied: bool = False

    def to_dict(self) -> dict:
        return {
            "target_calories": self.target_calories,
            "adjusted_daily_diff": self.adjusted_daily_diff,
            "warning_message": self.warning_message,
            "hard_floor_applied": self.hard_floor_applied,
        }


@dataclass(frozen=True)
class CalorieEstimate:
    """Full breakdown behind a suggested daily target."""

    bmr: float
    tdee: float
    requested_daily_diff: float
    weeks_to_goal: int | None
    result: CalorieTargetResult

    @property
    def maintenance_calories(self) -> int:
        return int(round(self.tdee))


def _coerce_sex(sex: Sex | str) -> Sex:
    try:
        return Sex(sex)
    except ValueError:
        return Sex.UNKNOWN


def calculate_bmr(weight_kg: float, height_cm: float, age_years: float, sex: Sex | str) -> float:
    """Basal metabolic rate in kcal/day (Mifflin-St Jeor)."""
    if weight_kg <= 0 or height_cm <= 0 or age_years < 0:
        raise ValueError("Weight and height must be positive and age non-negative")
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age_years
    return base + SEX_CONSTANTS[_coerce_sex(sex)]


def calculate_tdee(bmr: float, activity_level: ActivityLevel | str) -> float:
    """Total daily energy expenditure in kcal/day.

    Raises:
        ValueError: If the activity level is not one of the known levels
    """
    return bmr * ACTIVITY_MULTIPLIERS[ActivityLevel(activity_level)]


def calculate_required_daily_calorie_diff(
    current_weight_kg: float, goal_weight_kg: float, weeks_to_goal: float
) -> float:
    """Daily kcal difference needed to move from current to goal weight.

    Negative values are deficits, positive values surpluses.
    """
    if weeks_to_goal <= 0:
        raise ValueError("weeks_to_goal must be positive")
    total_kcal = (goal_weight_kg - current_weight_kg) * KCAL_PER_KG
    return total_kcal / (weeks_to_goal * DAYS_PER_WEEK)


def default_daily_diff(goal_type: GoalType | str) -> int:
    """Mild daily diff used when there is no target date."""
    goal = GoalType(goal_type)
    if goal == GoalType.LOSE:
        return -DEFAULT_DAILY_DIFF
    if goal == GoalType.GAIN:
        return DEFAULT_DAILY_DIFF
    return 0


def soft_floor_for(sex: Sex | str, soft_floors: dict[Sex, int] | None = None) -> int:
    floors = soft_floors or SOFT_FLOOR_KCAL
    return floors.get(_coerce_sex(sex), SOFT_FLOOR_KCAL[Sex.UNKNOWN])


def calculate_safe_calorie_target(
    tdee: float,
    requested_daily_diff: float,
    sex: Sex | str,
    hard_floor: int = HARD_FLOOR_KCAL,
    soft_floors: dict[Sex, int] | None = None,
) -> CalorieTargetResult:
    """Apply the daily diff to TDEE without ever going under the hard floor."""
    soft_floor = max(soft_floor_for(sex, soft_floors), hard_floor)
    unclamped = tdee + requested_daily_diff

    if not math.isfinite(unclamped) or unclamped < hard_floor:
        target = hard_floor
        return CalorieTargetResult(
            target_calories=target,
            adjusted_daily_diff=int(round(target - tdee)) if math.isfinite(tdee) else 0,
            hard_floor_applied=True,
        )

    if unclamped < soft_floor:
        target = soft_floor
        # A deficit request never turns into a surplus; cap at maintenance
        if requested_daily_diff < 0 and tdee < soft_floor:
            target = int(round(tdee))
        return CalorieTargetResult(
            target_calories=target,
            adjusted_daily_diff=int(round(target - tdee)),
            warning_message=(
                f"Your requested pace would take you below {soft_floor} kcal per day, "
                f"so your target was raised to {target} kcal."
            ),
        )

    return CalorieTargetResult(
        target_calories=int(round(unclamped)),
        adjusted_daily_diff=int(round(requested_daily_diff)),
    )


def weeks_until(target_date: date | None, today: date | None = None) -> int | None:
    """Whole weeks (rounded up) until the target date, None if under one week."""
    if target_date is None:
        return None
    today = today or date.today()
    days = (target_date - today).days
    if days < DAYS_PER_WEEK:
        return None
    return math.ceil(days / DAYS_PER_WEEK)


def estimate_from_metrics(
    weight_kg: float,
    height_cm: float,
    age_years: float,
    sex: Sex | str,
    activity_level: ActivityLevel | str,
    goal_type: GoalType | str,
    goal_weight_kg: float | None = None,
    weeks_to_goal: int | None = None,
    hard_floor: int = HARD_FLOOR_KCAL,
    soft_floors: dict[Sex, int] | None = None,
) -> CalorieEstimate:
    """Compose BMR, TDEE, required diff and the safety clamp."""
    bmr = calculate_bmr(weight_kg, height_cm, age_years, sex)
    tdee = calculate_tdee(bmr, activity_level)

    goal = GoalType(goal_type)
    if weeks_to_goal and goal_weight_kg is not None and goal in (GoalType.LOSE, GoalType.GAIN):
        daily_diff = calculate_required_daily_calorie_diff(weight_kg, goal_weight_kg, weeks_to_goal)
    else:
        weeks_to_goal = None
        daily_diff = float(default_daily_diff(goal))

    result = calculate_safe_calorie_target(tdee, daily_diff, sex, hard_floor, soft_floors)
    return CalorieEstimate(
        bmr=bmr,
        tdee=tdee,
        requested_daily_diff=daily_diff,
        weeks_to_goal=weeks_to_goal,
        result=result,
    )


def session_weeks_to_goal(session: OnboardingSession, today: date | None = None) -> int | None:
    """Weeks implied by the session's timeframe choice, None when open-ended."""
    if session.goal_timeframe == Timeframe.CUSTOM_DATE:
        return weeks_until(parse_iso_date(session.goal_target_date), today)
    return session.goal_timeframe.weeks


def estimate_calorie_target(
    session: OnboardingSession,
    today: date | None = None,
    hard_floor: int = HARD_FLOOR_KCAL,
    soft_floors: dict[Sex, int] | None = None,
) -> CalorieEstimate:
    """Estimate the daily target from the values collected so far.

    Raises:
        ValueError: If weight, height, date of birth, activity or goal are
            missing or unparseable
    """
    weight_lb = session.parsed_weight_lb
    height_cm = session.parsed_height_cm
    if weight_lb is None or height_cm is None:
        raise ValueError("Current weight and height are required for a calorie estimate")
    if not session.activity_level or not session.goal_type:
        raise ValueError("Activity level and goal are required for a calorie estimate")

    goal_lb = session.parsed_goal_weight_lb
    return estimate_from_metrics(
        weight_kg=lb_to_kg(weight_lb),
        height_cm=height_cm,
        age_years=age_from_dob(session.date_of_birth, today),
        sex=session.sex or Sex.UNKNOWN,
        activity_level=session.activity_level,
        goal_type=session.goal_type,
        goal_weight_kg=lb_to_kg(goal_lb) if goal_lb is not None else None,
        weeks_to_goal=session_weeks_to_goal(session, today),
        hard_floor=hard_floor,
        soft_floors=soft_floors,
    )


def calorie_target_for_plan(
    plan: CaloriePlan | str,
    estimate: CalorieEstimate,
    goal_type: GoalType | str,
    sex: Sex | str,
    hard_floor: int = HARD_FLOOR_KCAL,
    soft_floors: dict[Sex, int] | None = None,
) -> CalorieTargetResult:
    """Safe target for one of the preset calorie plans.

    ``on_time`` follows the pace needed to hit the target date,
    ``sustainable`` the mild default pace and ``accelerated`` a faster
    fixed pace. Maintenance and recomp goals get zero diff on every plan.

    Raises:
        ValueError: For the custom plan, which has no computed target
    """
    plan = CaloriePlan(plan)
    goal = GoalType(goal_type)
    if plan == CaloriePlan.CUSTOM:
        raise ValueError("The custom plan has no computed target")
    if plan == CaloriePlan.ON_TIME:
        return estimate.result

    diff = float(default_daily_diff(goal))
    if plan == CaloriePlan.ACCELERATED and diff:
        diff = math.copysign(ACCELERATED_DAILY_DIFF, diff)
    return calculate_safe_calorie_target(estimate.tdee, diff, sex, hard_floor, soft_floors)
