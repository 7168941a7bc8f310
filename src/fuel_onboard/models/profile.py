"""Stored profile and legal document models."""

from dataclasses import dataclass, fields
from datetime import datetime

from .session import LegalDocType

# Columns that may be written through a partial update
PROFILE_FIELDS: tuple[str, ...] = (
    "first_name",
    "date_of_birth",
    "gender",
    "height_cm",
    "height_unit",
    "activity_level",
    "weight_lb",
    "weight_unit",
    "body_fat_percent",
    "goal_type",
    "goal_weight_lb",
    "goal_timeframe",
    "goal_target_date",
    "daily_calorie_target",
    "maintenance_calories",
    "calorie_plan",
    "onboarding_calorie_set_at",
    "protein_g_min",
    "fiber_g_min",
    "carbs_g_max",
    "sugar_g_max",
    "sodium_mg_max",
    "water_goal_ml",
    "onboarding_targets_set_at",
    "focus_module_1",
    "focus_module_2",
    "focus_module_3",
    "plan",
    "onboarding_complete",
)


@dataclass
class ProfileRecord:
    """Canonical user profile row."""

    id: int | None = None
    first_name: str | None = None
    date_of_birth: str | None = None
    gender: str | None = None
    height_cm: float | None = None
    height_unit: str | None = None
    activity_level: str | None = None
    weight_lb: float | None = None
    weight_unit: str | None = None
    body_fat_percent: float | None = None
    goal_type: str | None = None
    goal_weight_lb: float | None = None
    goal_timeframe: str | None = None
    goal_target_date: str | None = None
    daily_calorie_target: int | None = None
    maintenance_calories: int | None = None
    calorie_plan: str | None = None
    onboarding_calorie_set_at: str | None = None
    protein_g_min: int | None = None
    fiber_g_min: int | None = None
    carbs_g_max: int | None = None
    sugar_g_max: int | None = None
    sodium_mg_max: int | None = None
    water_goal_ml: int | None = None
    onboarding_targets_set_at: str | None = None
    focus_module_1: str | None = None
    focus_module_2: str | None = None
    focus_module_3: str | None = None
    plan: str | None = None
    onboarding_complete: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and caching."""
        data = {name: getattr(self, name) for name in PROFILE_FIELDS}
        data["id"] = self.id
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ProfileRecord":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values["onboarding_complete"] = bool(values.get("onboarding_complete", False))
        for key in ("created_at", "updated_at"):
            if isinstance(values.get(key), str):
                values[key] = datetime.fromisoformat(values[key])
        return cls(**values)

    def merged(self, patch: dict) -> "ProfileRecord":
        """Return a copy with the patch merged over this record's values."""
        data = self.to_dict()
        data.update(patch)
        return ProfileRecord.from_dict(data)


@dataclass(frozen=True)
class LegalDocument:
    """A versioned legal document the user must accept."""

    doc_type: LegalDocType
    version: str
    title: str = ""

    def to_dict(self) -> dict:
        return {"doc_type": self.doc_type.value, "version": self.version, "title": self.title}


@dataclass(frozen=True)
class LegalAcceptance:
    """Record of a user accepting one document version."""

    doc_type: LegalDocType
    version: str
    accepted_at: datetime
