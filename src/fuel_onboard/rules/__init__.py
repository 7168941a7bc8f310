"""Pure onboarding rules: validation, calorie policy, goal weight and targets."""

from .calories import (
    CalorieEstimate,
    CalorieTargetResult,
    calculate_bmr,
    calculate_required_daily_calorie_diff,
    calculate_safe_calorie_target,
    calculate_tdee,
    estimate_calorie_target,
)
from .goal_weight import (
    GoalWeightAccepted,
    SuggestedTarget,
    get_suggested_target_weight_lb,
    validate_goal_weight,
)
from .issue import ValidationIssue
from .nutrients import suggest_focus_targets
from .validators import validate_step

__all__ = [
    "calculate_bmr",
    "calculate_required_daily_calorie_diff",
    "calculate_safe_calorie_target",
    "calculate_tdee",
    "CalorieEstimate",
    "CalorieTargetResult",
    "estimate_calorie_target",
    "get_suggested_target_weight_lb",
    "GoalWeightAccepted",
    "suggest_focus_targets",
    "SuggestedTarget",
    "validate_goal_weight",
    "validate_step",
    "ValidationIssue",
]
