"""Data models for fuel-onboard."""

from .profile import PROFILE_FIELDS, LegalAcceptance, LegalDocument, ProfileRecord
from .session import (
    ActivityLevel,
    CaloriePlan,
    FocusModule,
    FocusTargets,
    GoalType,
    HeightUnit,
    LegalDocType,
    OnboardingSession,
    Sex,
    Step,
    SubscriptionPlan,
    Timeframe,
    WeightUnit,
)

__all__ = [
    "ActivityLevel",
    "CaloriePlan",
    "FocusModule",
    "FocusTargets",
    "GoalType",
    "HeightUnit",
    "LegalAcceptance",
    "LegalDocType",
    "LegalDocument",
    "OnboardingSession",
    "PROFILE_FIELDS",
    "ProfileRecord",
    "Sex",
    "Step",
    "SubscriptionPlan",
    "Timeframe",
    "WeightUnit",
]
