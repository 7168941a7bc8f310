"""Onboarding rule and profile routes."""

from datetime import date

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from ...config import settings
from ...db.repositories import ProfileRepository
from ...errors import OnboardingValidationError
from ...models.session import ActivityLevel, GoalType, Sex, WeightUnit
from ...rules.calories import SOFT_FLOOR_KCAL, estimate_from_metrics
from ...rules.goal_weight import get_suggested_target_weight_lb, validate_goal_weight
from ...rules.nutrients import suggest_focus_targets

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


class CalorieTargetRequest(BaseModel):
    weight_kg: float = Field(gt=0)
    height_cm: float = Field(gt=0)
    age_years: int = Field(gt=0)
    sex: Sex = Sex.UNKNOWN
    activity_level: ActivityLevel
    goal_type: GoalType
    goal_weight_kg: float | None = None
    weeks_to_goal: int | None = Field(default=None, gt=0)


class GoalWeightValidateRequest(BaseModel):
    current_weight_lb: float = Field(gt=0)
    goal_type: GoalType
    weight_unit: WeightUnit = WeightUnit.LB
    target: str | float | None = None


class GoalWeightSuggestRequest(BaseModel):
    goal_type: GoalType
    current_weight_lb: float = Field(gt=0)
    height_cm: float | None = None
    sex: Sex | None = None
    date_of_birth: date | None = None


class FocusTargetsRequest(BaseModel):
    current_weight_lb: float = Field(gt=0)
    goal_weight_lb: float | None = None
    sex: Sex = Sex.UNKNOWN
    activity_level: ActivityLevel


def _soft_floors() -> dict[Sex, int]:
    return {
        Sex.MALE: settings.soft_floor_male_kcal,
        Sex.FEMALE: settings.soft_floor_female_kcal,
        Sex.UNKNOWN: SOFT_FLOOR_KCAL[Sex.UNKNOWN],
    }


@router.post("/calorie-target")
async def calorie_target(body: CalorieTargetRequest):
    """BMR, TDEE and the clamped daily calorie target."""
    try:
        estimate = estimate_from_metrics(
            body.weight_kg,
            body.height_cm,
            body.age_years,
            body.sex,
            body.activity_level,
            body.goal_type,
            goal_weight_kg=body.goal_weight_kg,
            weeks_to_goal=body.weeks_to_goal,
            hard_floor=settings.hard_floor_kcal,
            soft_floors=_soft_floors(),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "bmr": round(estimate.bmr),
        "tdee": round(estimate.tdee),
        "maintenance_calories": estimate.maintenance_calories,
        "requested_daily_diff": round(estimate.requested_daily_diff),
        "weeks_to_goal": estimate.weeks_to_goal,
        **estimate.result.to_dict(),
    }


@router.post("/goal-weight/validate")
async def goal_weight_validate(body: GoalWeightValidateRequest):
    """Check a goal weight; failures come back as a translation key."""
    outcome = validate_goal_weight(
        body.current_weight_lb, body.goal_type, body.weight_unit, body.target
    )
    if not outcome.ok:
        raise OnboardingValidationError(outcome.i18n_key, outcome.i18n_params)
    return outcome.to_dict()


@router.post("/goal-weight/suggest")
async def goal_weight_suggest(body: GoalWeightSuggestRequest):
    """Suggested goal weight for pre-filling the goal-weight step."""
    outcome = get_suggested_target_weight_lb(
        body.goal_type,
        body.current_weight_lb,
        body.height_cm,
        body.sex,
        body.date_of_birth,
        date.today(),
    )
    return outcome.to_dict()


@router.post("/focus-targets")
async def focus_targets(body: FocusTargetsRequest):
    """Suggested daily nutrient and water targets."""
    targets = suggest_focus_targets(
        body.goal_weight_lb or body.current_weight_lb,
        body.current_weight_lb,
        body.sex,
        body.activity_level,
    )
    return targets.to_dict()


@router.get("/profiles/{profile_id}")
async def get_profile(request: Request, profile_id: int):
    """Stored profile row."""
    repo = ProfileRepository(request.app.state.db_path)
    record = await repo.get(profile_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Profile {profile_id} not found")
    return record.to_dict()
