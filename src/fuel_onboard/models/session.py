"""Onboarding session state models."""

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum, IntEnum

from ..utils.metrics import ft_in_to_cm, parse_inches, parse_positive_float, weight_to_lb


class Sex(str, Enum):
    """Sex at birth, as used by the energy formulas."""

    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"  # Not collected by the wizard, only tolerated by the math


class ActivityLevel(str, Enum):
    """Daily activity level, ordered from least to most active."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class GoalType(str, Enum):
    """Weight goal direction."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"
    RECOMP = "recomp"  # Body recomposition, weight roughly stable


class WeightUnit(str, Enum):
    KG = "kg"
    LB = "lbs"


class HeightUnit(str, Enum):
    CM = "cm"
    FT = "ft"


class Timeframe(str, Enum):
    """How soon the user wants to reach the goal weight."""

    THREE_MONTHS = "3_months"
    SIX_MONTHS = "6_months"
    TWELVE_MONTHS = "12_months"
    NO_DEADLINE = "no_deadline"
    CUSTOM_DATE = "custom_date"

    @property
    def weeks(self) -> int | None:
        """Fixed number of weeks, or None for open-ended / custom timeframes."""
        return {
            Timeframe.THREE_MONTHS: 12,
            Timeframe.SIX_MONTHS: 26,
            Timeframe.TWELVE_MONTHS: 52,
        }.get(self)


class CaloriePlan(str, Enum):
    """Calorie plan chosen on the calorie target step."""

    ON_TIME = "on_time"
    SUSTAINABLE = "sustainable"
    ACCELERATED = "accelerated"
    CUSTOM = "custom"

    @property
    def stored_label(self) -> str:
        """Label persisted on the profile."""
        return {
            CaloriePlan.ON_TIME: "calculated",
            CaloriePlan.SUSTAINABLE: "recommended",
            CaloriePlan.ACCELERATED: "aggressive",
            CaloriePlan.CUSTOM: "custom",
        }[self]


class FocusModule(str, Enum):
    """App modules the user can rank on the home screen."""

    FOOD = "Food"  # Always ranked first
    EXERCISE = "Exercise"
    MED = "Med"
    WATER = "Water"


class SubscriptionPlan(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


class LegalDocType(str, Enum):
    TERMS = "terms"
    PRIVACY = "privacy"
    HEALTH_DISCLAIMER = "health_disclaimer"


class Step(IntEnum):
    """Wizard steps in display order."""

    NAME_AGE = 1
    SEX = 2
    HEIGHT = 3
    ACTIVITY = 4
    CURRENT_WEIGHT = 5
    GOAL = 6
    GOAL_WEIGHT = 7
    CALORIE_TARGET = 8
    FOCUS_TARGETS = 9
    MODULES = 10
    PLAN = 11
    LEGAL = 12


@dataclass(frozen=True)
class FocusTargets:
    """Daily nutrient and water targets chosen during onboarding."""

    protein_g_min: int
    fiber_g_min: int
    carbs_g_max: int
    sugar_g_max: int
    sodium_mg_max: int
    water_ml: int

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "FocusTargets":
        return cls(**{f.name: int(data[f.name]) for f in fields(cls)})


@dataclass(frozen=True)
class OnboardingSession:
    """Client-side form state for one run of the onboarding wizard.

    Values hold what the user typed or picked, as-is. Nothing here is
    persisted directly; the draft accumulator derives the profile patch.
    Instances are immutable: step handlers produce a delta and the
    sequencer applies it with ``apply``.
    """

    profile_id: int
    current_step: int = 1
    total_steps: int = 12
    constrained_host: bool = False

    # Step 1: name + date of birth (YYYY-MM-DD)
    preferred_name: str = ""
    date_of_birth: str = ""

    # Step 2
    sex: str = ""

    # Step 3: either cm or ft/in depending on height_unit
    height_unit: HeightUnit = HeightUnit.CM
    height_cm: str = ""
    height_ft: str = ""
    height_in: str = ""

    # Step 4
    activity_level: str = ""

    # Step 5: weight in weight_unit, optional body fat percent
    weight_unit: WeightUnit = WeightUnit.LB
    current_weight: str = ""
    body_fat_percent: str = ""

    # Step 6
    goal_type: str = ""

    # Step 7: goal weight in weight_unit plus timeframe
    goal_weight: str = ""
    goal_timeframe: Timeframe = Timeframe.NO_DEADLINE
    goal_target_date: str = ""

    # Step 8
    calorie_target: int | None = None
    maintenance_calories: int | None = None
    calorie_plan: str = ""

    # Step 9
    focus_targets: FocusTargets | None = None

    # Step 10: secondary modules in rank order (Food is implicit rank 1)
    focus_modules: tuple[str, ...] = ()

    # Step 11
    plan: str = ""

    # Step 12
    legal_agree_terms: bool = False
    legal_agree_privacy: bool = False
    legal_acknowledge_risk: bool = False

    def apply(self, delta: dict) -> "OnboardingSession":
        """Return a copy with the given field changes applied."""
        if not delta:
            return self
        unknown = set(delta) - {f.name for f in fields(self)}
        if unknown:
            raise ValueError(f"Unknown session fields: {sorted(unknown)}")
        return replace(self, **delta)

    @property
    def parsed_height_cm(self) -> float | None:
        """Height in centimetres, or None if the active input is not parseable."""
        if self.height_unit == HeightUnit.FT:
            feet = parse_positive_float(self.height_ft)
            if feet is None:
                return None
            inches = parse_inches(self.height_in)
            if inches is None:
                return None
            return ft_in_to_cm(feet, inches)
        return parse_positive_float(self.height_cm)

    @property
    def parsed_weight_lb(self) -> float | None:
        value = parse_positive_float(self.current_weight)
        return weight_to_lb(value, self.weight_unit.value) if value is not None else None

    @property
    def parsed_goal_weight_lb(self) -> float | None:
        value = parse_positive_float(self.goal_weight)
        return weight_to_lb(value, self.weight_unit.value) if value is not None else None

    @property
    def parsed_body_fat(self) -> float | None:
        return parse_positive_float(self.body_fat_percent)

    @property
    def legal_accepted(self) -> bool:
        return self.legal_agree_terms and self.legal_agree_privacy and self.legal_acknowledge_risk

    def to_dict(self) -> dict:
        """Convert to a JSON-serialisable dictionary."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["height_unit"] = self.height_unit.value
        data["weight_unit"] = self.weight_unit.value
        data["goal_timeframe"] = self.goal_timeframe.value
        data["focus_targets"] = self.focus_targets.to_dict() if self.focus_targets else None
        data["focus_modules"] = list(self.focus_modules)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OnboardingSession":
        """Create from dictionary."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "height_unit" in values:
            values["height_unit"] = HeightUnit(values["height_unit"])
        if "weight_unit" in values:
            values["weight_unit"] = WeightUnit(values["weight_unit"])
        if "goal_timeframe" in values:
            values["goal_timeframe"] = Timeframe(values["goal_timeframe"])
        if values.get("focus_targets") is not None:
            values["focus_targets"] = FocusTargets.from_dict(values["focus_targets"])
        if "focus_modules" in values:
            values["focus_modules"] = tuple(values["focus_modules"])
        return cls(**values)
