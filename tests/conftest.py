"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from fuel_onboard.db.engine import init_db, seed_legal_documents
from fuel_onboard.models.profile import LegalDocument, ProfileRecord
from fuel_onboard.models.session import (
    FocusTargets,
    HeightUnit,
    LegalDocType,
    OnboardingSession,
    Timeframe,
    WeightUnit,
)

TODAY = date(2026, 10, 18)
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return NOW


class FakeProfileStore:
    """In-memory profile store with injectable failures and latency."""

    def __init__(self):
        self.records: dict[int, ProfileRecord] = {}
        self.calls: list[tuple[int, dict]] = []
        self.failures = 0
        self.delay = 0.0
        self.commit_delay = 0.0

    async def get(self, profile_id: int) -> ProfileRecord | None:
        return self.records.get(profile_id)

    async def update(self, profile_id: int, fields: dict) -> ProfileRecord:
        self.calls.append((profile_id, dict(fields)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.commit_delay and fields.get("onboarding_complete"):
            await asyncio.sleep(self.commit_delay)
        if self.failures:
            self.failures -= 1
            raise RuntimeError("store unavailable")
        record = self.records.get(profile_id) or ProfileRecord(id=profile_id)
        record = record.merged(fields)
        self.records[profile_id] = record
        return record


class FakeLegalStore:
    def __init__(self, documents: list[LegalDocument] | None = None):
        self.documents = list(documents or [])
        self.accepted: list[tuple[int, LegalDocument]] = []

    async def fetch_active(self) -> list[LegalDocument]:
        return list(self.documents)

    async def accept(self, profile_id: int, documents: list[LegalDocument]) -> None:
        for doc in documents:
            if (profile_id, doc) not in self.accepted:
                self.accepted.append((profile_id, doc))


class FakeWeightLog:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.entries: list[dict] = []

    async def insert(self, profile_id, weighed_at, weight_lb, body_fat_percent, weight_unit):
        if self.fail:
            raise RuntimeError("weight_log table unavailable")
        self.entries.append(
            {
                "profile_id": profile_id,
                "weighed_at": weighed_at,
                "weight_lb": weight_lb,
                "body_fat_percent": body_fat_percent,
                "weight_unit": weight_unit,
            }
        )
        return len(self.entries)


ACTIVE_DOCUMENTS = [
    LegalDocument(LegalDocType.TERMS, "1", "Terms of Service"),
    LegalDocument(LegalDocType.PRIVACY, "1", "Privacy Policy"),
    LegalDocument(LegalDocType.HEALTH_DISCLAIMER, "1", "Health Disclaimer"),
]


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
async def db_path(temp_db_path):
    """Temporary database with the schema and legal documents in place."""
    await init_db(temp_db_path)
    await seed_legal_documents(temp_db_path)
    return temp_db_path


@pytest.fixture
def profile_store():
    return FakeProfileStore()


@pytest.fixture
def legal_store():
    return FakeLegalStore(ACTIVE_DOCUMENTS)


@pytest.fixture
def complete_session():
    """A session with every step answered, sitting on the legal step."""
    return OnboardingSession(
        profile_id=1,
        current_step=12,
        preferred_name="Alex",
        date_of_birth="1994-05-01",
        sex="male",
        height_unit=HeightUnit.CM,
        height_cm="175",
        activity_level="moderate",
        weight_unit=WeightUnit.LB,
        current_weight="180",
        body_fat_percent="22.5",
        goal_type="lose",
        goal_weight="170",
        goal_timeframe=Timeframe.SIX_MONTHS,
        calorie_target=2200,
        maintenance_calories=2600,
        calorie_plan="on_time",
        focus_targets=FocusTargets(130, 30, 170, 40, 2300, 2700),
        focus_modules=("Water", "Exercise"),
        plan="free",
        legal_agree_terms=True,
        legal_agree_privacy=True,
        legal_acknowledge_risk=True,
    )
