"""Goal-weight bounds checking and the suggested-target heuristic.

All comparisons happen in pounds, whatever unit the user typed. The
suggestion is only ever offered as a pre-fill: it is computed from the
intersection of the storage bounds, BMI guardrails and the same validity
range the validator enforces, so a suggestion always passes validation.
"""

import math
from dataclasses import dataclass
from datetime import date

from ..models.session import GoalType, Sex, WeightUnit
from ..utils.metrics import (
    MAX_WEIGHT_LB,
    MIN_WEIGHT_LB,
    age_from_dob,
    kg_to_lb,
    lb_to_kg,
    round_to,
)
from .issue import ValidationIssue

KEY_PREFIX = "onboarding.goal_weight."

MIN_DELTA_LB = 1.0
MAX_DELTA_LOSE_PCT = 0.35
MAX_DELTA_GAIN_PCT = 0.35
MAINTAIN_RECOMP_PCT = 0.02
MAINTAIN_RECOMP_ABS_CAP_LB = 5.0

LOSS_SUGGESTION_PCT = 0.05
GAIN_SUGGESTION_PCT = 0.04

SENIOR_AGE = 65
# (under 65, 65 and over)
MIN_BMI: dict[Sex, tuple[float, float]] = {
    Sex.MALE: (18.5, 20.0),
    Sex.FEMALE: (18.0, 19.0),
    Sex.UNKNOWN: (18.5, 19.5),
}
MAX_BMI: dict[Sex, tuple[float, float]] = {
    Sex.MALE: (40.0, 38.0),
    Sex.FEMALE: (40.0, 38.0),
    Sex.UNKNOWN: (40.0, 38.0),
}
SAFE_MIN_BUFFER_KG = 2.0


@dataclass(frozen=True)
class GoalWeightAccepted:
    """Successful validation; target normalised to pounds (1 decimal)."""

    target_lb: float
    ok = True

    def to_dict(self) -> dict:
        return {"ok": True, "target_lb": self.target_lb}


@dataclass(frozen=True)
class GoalWeightRange:
    min_lb: float
    max_lb: float
    recommended_lb: float
    delta_lb: float | None = None


@dataclass(frozen=True)
class SuggestedTarget:
    """A proposed goal weight and the feasible window it was drawn from."""

    suggested_lb: float
    min_allowed_lb: float
    max_allowed_lb: float
    was_clamped: bool
    ok = True

    def to_dict(self) -> dict:
        return {
            "ok": True,
            "suggested_lb": self.suggested_lb,
            "min_allowed_lb": self.min_allowed_lb,
            "max_allowed_lb": self.max_allowed_lb,
            "was_clamped": self.was_clamped,
        }


def _issue(suffix: str, **params) -> ValidationIssue:
    return ValidationIssue(KEY_PREFIX + suffix, params)


def _band_delta(current_weight_lb: float) -> float:
    return min(current_weight_lb * MAINTAIN_RECOMP_PCT, MAINTAIN_RECOMP_ABS_CAP_LB)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def get_goal_weight_range(current_weight_lb: float, goal_type: GoalType | str) -> GoalWeightRange:
    """Allowed target range in pounds for a goal, clamped to storage bounds."""
    goal = GoalType(goal_type)
    if goal == GoalType.LOSE:
        low = max(MIN_WEIGHT_LB, current_weight_lb * (1 - MAX_DELTA_LOSE_PCT))
        high = current_weight_lb - MIN_DELTA_LB
        return GoalWeightRange(low, high, high)
    if goal == GoalType.GAIN:
        low = current_weight_lb + MIN_DELTA_LB
        high = min(MAX_WEIGHT_LB, current_weight_lb * (1 + MAX_DELTA_GAIN_PCT))
        return GoalWeightRange(low, high, low)

    delta = _band_delta(current_weight_lb)
    return GoalWeightRange(
        _clamp(current_weight_lb - delta, MIN_WEIGHT_LB, MAX_WEIGHT_LB),
        _clamp(current_weight_lb + delta, MIN_WEIGHT_LB, MAX_WEIGHT_LB),
        current_weight_lb,
        delta,
    )


def validate_goal_weight(
    current_weight_lb: float,
    goal_type: GoalType | str,
    weight_unit: WeightUnit | str,
    target_input: float | str | None,
) -> GoalWeightAccepted | ValidationIssue:
    """Check a goal weight typed in the display unit against the goal's bounds.

    Checks run in order: number, storage range, direction, minimum delta,
    maximum delta. The first failure is returned.
    """
    unit = WeightUnit(weight_unit)
    try:
        value = float(str(target_input).strip().replace(",", ".")) if target_input is not None else math.nan
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        return _issue("goal_weight_error_invalid_number")

    target_lb = kg_to_lb(value) if unit == WeightUnit.KG else value

    if target_lb < MIN_WEIGHT_LB or target_lb > MAX_WEIGHT_LB:
        if unit == WeightUnit.KG:
            return _issue(
                "goal_weight_error_range_kg",
                minKg=round_to(lb_to_kg(MIN_WEIGHT_LB), 1),
                maxKg=round_to(lb_to_kg(MAX_WEIGHT_LB), 1),
            )
        return _issue("goal_weight_error_range_lb", minLb=MIN_WEIGHT_LB, maxLb=MAX_WEIGHT_LB)

    goal = GoalType(goal_type)
    bounds = get_goal_weight_range(current_weight_lb, goal)

    if goal == GoalType.LOSE:
        if target_lb >= current_weight_lb:
            return _issue("goal_weight_error_lose_not_lower")
        if target_lb > bounds.max_lb:
            return _issue("goal_weight_error_lose_min_delta", minDelta=int(MIN_DELTA_LB))
        if target_lb < bounds.min_lb:
            return _issue("goal_weight_error_lose_too_aggressive")
    elif goal == GoalType.GAIN:
        if target_lb <= current_weight_lb:
            return _issue("goal_weight_error_gain_not_higher")
        if target_lb < bounds.min_lb:
            return _issue("goal_weight_error_gain_min_delta", minDelta=int(MIN_DELTA_LB))
        if target_lb > bounds.max_lb:
            return _issue("goal_weight_error_gain_too_aggressive")
    elif not bounds.min_lb <= target_lb <= bounds.max_lb:
        display = lb_to_kg(bounds.delta_lb) if unit == WeightUnit.KG else bounds.delta_lb
        suffix = "kg" if unit == WeightUnit.KG else "lb"
        return _issue(f"goal_weight_error_{goal.value}_range_{suffix}", delta=round_to(display, 1))

    return GoalWeightAccepted(target_lb=round_to(target_lb, 1))


def _bmi_bucket(table: dict[Sex, tuple[float, float]], sex: Sex | str, age: int) -> float:
    try:
        key = sex if isinstance(sex, Sex) else Sex(sex.strip().lower())
    except ValueError:
        key = Sex.UNKNOWN
    under, over = table[key]
    return under if age < SENIOR_AGE else over


def get_min_safe_weight_lb(
    height_cm: float, sex: Sex | str, dob: date | str, today: date | None = None
) -> float:
    """Lowest weight inside the BMI guardrail, plus a safety buffer."""
    height_m = height_cm / 100
    min_kg = _bmi_bucket(MIN_BMI, sex, age_from_dob(dob, today)) * height_m * height_m
    return _clamp(kg_to_lb(min_kg + SAFE_MIN_BUFFER_KG), MIN_WEIGHT_LB, MAX_WEIGHT_LB)


def get_max_safe_weight_lb(
    height_cm: float, sex: Sex | str, dob: date | str, today: date | None = None
) -> float:
    """Highest weight inside the BMI guardrail."""
    height_m = height_cm / 100
    max_kg = _bmi_bucket(MAX_BMI, sex, age_from_dob(dob, today)) * height_m * height_m
    return _clamp(kg_to_lb(max_kg), MIN_WEIGHT_LB, MAX_WEIGHT_LB)


def get_suggested_target_weight_lb(
    goal_type: GoalType | str,
    current_weight_lb: float,
    height_cm: float | None,
    sex: Sex | str | None,
    dob: date | str | None,
    today: date | None = None,
) -> SuggestedTarget | ValidationIssue:
    """Propose a goal weight to pre-fill the goal-weight step.

    Maintain and recomp goals suggest the current weight. Lose and gain
    need height, sex and date of birth; without them, or when the
    guardrails leave no feasible window, ``suggestion_unavailable`` is
    returned instead.
    """
    goal = GoalType(goal_type)
    validity = get_goal_weight_range(current_weight_lb, goal)

    if goal in (GoalType.MAINTAIN, GoalType.RECOMP):
        return SuggestedTarget(current_weight_lb, validity.min_lb, validity.max_lb, False)

    if height_cm is None or not sex or not dob:
        return _issue("suggestion_unavailable")

    low = max(MIN_WEIGHT_LB, get_min_safe_weight_lb(height_cm, sex, dob, today), validity.min_lb)
    high = min(MAX_WEIGHT_LB, get_max_safe_weight_lb(height_cm, sex, dob, today), validity.max_lb)
    if low > high:
        return _issue("suggestion_unavailable")

    if goal == GoalType.LOSE:
        base = current_weight_lb * (1 - LOSS_SUGGESTION_PCT)
    else:
        base = current_weight_lb * (1 + GAIN_SUGGESTION_PCT)

    suggested = _clamp(base, low, high)
    return SuggestedTarget(
        suggested_lb=suggested,
        min_allowed_lb=low,
        max_allowed_lb=high,
        was_clamped=suggested != base,
    )
