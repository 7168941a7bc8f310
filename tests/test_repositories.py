"""Tests for the SQLite repositories and caches."""

import sqlite3
from datetime import datetime, timezone

import pytest

from fuel_onboard.db.engine import seed_legal_documents
from fuel_onboard.db.repositories import (
    KeyValueRepository,
    LegalRepository,
    ProfileRepository,
    WeightLogRepository,
)
from fuel_onboard.errors import ProfileNotFound
from fuel_onboard.models.profile import LegalDocument
from fuel_onboard.models.session import LegalDocType
from fuel_onboard.services.cache import DurableProfileCache


class TestProfileRepository:
    """Tests for profile persistence."""

    async def test_create_and_get(self, db_path):
        """Test a new profile starts incomplete."""
        repo = ProfileRepository(db_path)
        profile_id = await repo.create("Alex")
        record = await repo.get(profile_id)
        assert record.first_name == "Alex"
        assert record.onboarding_complete is False
        assert await repo.get(9999) is None

    async def test_partial_update_keeps_other_columns(self, db_path):
        """Test writing some fields never clears the others."""
        repo = ProfileRepository(db_path)
        profile_id = await repo.create("Alex")
        await repo.update(profile_id, {"weight_lb": 180.0, "gender": "male"})

        record = await repo.update(profile_id, {"goal_type": "lose"})

        assert record.first_name == "Alex"
        assert record.weight_lb == 180.0
        assert record.gender == "male"
        assert record.goal_type == "lose"

    async def test_update_completion_flag(self, db_path):
        """Test the completion flag round-trips as a bool."""
        repo = ProfileRepository(db_path)
        profile_id = await repo.create()
        record = await repo.update(profile_id, {"onboarding_complete": True})
        assert record.onboarding_complete is True

    async def test_update_errors(self, db_path):
        """Test missing ids and unknown fields are rejected."""
        repo = ProfileRepository(db_path)
        profile_id = await repo.create()
        with pytest.raises(ProfileNotFound):
            await repo.update(9999, {"first_name": "Ghost"})
        with pytest.raises(ValueError):
            await repo.update(profile_id, {"favourite_colour": "green"})
        with pytest.raises(ValueError):
            await repo.update(None, {"first_name": "Ghost"})

    async def test_weight_bounds_enforced(self, db_path):
        """Test the table refuses weights outside the storable range."""
        repo = ProfileRepository(db_path)
        profile_id = await repo.create()
        with pytest.raises(sqlite3.IntegrityError):
            await repo.update(profile_id, {"weight_lb": 10.0})

    async def test_list_and_delete(self, db_path):
        """Test listing and deleting profiles."""
        repo = ProfileRepository(db_path)
        first = await repo.create("A")
        await repo.create("B")
        assert len(await repo.list_all()) == 2
        await repo.delete(first)
        assert [r.first_name for r in await repo.list_all()] == ["B"]


class TestWeightLogRepository:
    async def test_insert_and_list(self, db_path):
        """Test weigh-ins are listed newest first."""
        profile_id = await ProfileRepository(db_path).create()
        repo = WeightLogRepository(db_path)
        await repo.insert(profile_id, datetime(2026, 10, 1, tzinfo=timezone.utc), 182.0, None, "lbs")
        await repo.insert(profile_id, datetime(2026, 10, 18, tzinfo=timezone.utc), 180.0, 22.5, "lbs")

        entries = await repo.list_for_profile(profile_id)

        assert [e["weight_lb"] for e in entries] == [180.0, 182.0]
        assert entries[0]["body_fat_percent"] == 22.5


class TestLegalRepository:
    """Tests for legal documents and acceptances."""

    async def test_seed_is_idempotent(self, db_path):
        """Test seeding twice inserts nothing the second time."""
        assert await seed_legal_documents(db_path) == 0
        assert len(await LegalRepository(db_path).fetch_active()) == 3

    async def test_accept_twice(self, db_path):
        """Test re-accepting the same versions adds no rows."""
        profile_id = await ProfileRepository(db_path).create()
        repo = LegalRepository(db_path)
        documents = await repo.fetch_active()
        await repo.accept(profile_id, documents)
        await repo.accept(profile_id, documents)
        acceptances = await repo.list_acceptances(profile_id)
        assert len(acceptances) == 3
        assert {a.doc_type for a in acceptances} == set(LegalDocType)

    async def test_new_version_retires_old(self, db_path):
        """Test adding an active version replaces the previous one."""
        repo = LegalRepository(db_path)
        await repo.add(LegalDocument(LegalDocType.TERMS, "2", "Terms of Service"))
        active = {d.doc_type: d.version for d in await repo.fetch_active()}
        assert active[LegalDocType.TERMS] == "2"
        assert len(active) == 3


class TestCaches:
    """Tests for the key-value store and durable cache."""

    async def test_key_value(self, db_path):
        """Test set, overwrite, get and delete."""
        repo = KeyValueRepository(db_path)
        await repo.set("k", {"a": 1})
        await repo.set("k", {"a": 2})
        assert await repo.get("k") == {"a": 2}
        await repo.delete("k")
        assert await repo.get("k") is None

    async def test_durable_profile_cache(self, db_path):
        """Test a cached profile survives a new cache instance."""
        profiles = ProfileRepository(db_path)
        profile_id = await profiles.create("Alex")
        record = await profiles.update(profile_id, {"onboarding_complete": True})

        await DurableProfileCache(KeyValueRepository(db_path)).put(record)
        cached = await DurableProfileCache(KeyValueRepository(db_path)).get(profile_id)

        assert cached.first_name == "Alex"
        assert cached.onboarding_complete is True
