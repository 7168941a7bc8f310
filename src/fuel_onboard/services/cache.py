"""Client-side profile caches refreshed after onboarding completes."""

import asyncio

from ..db.repositories import KeyValueRepository
from ..models.profile import ProfileRecord


class MemoryProfileCache:
    """In-process profile cache."""

    def __init__(self):
        self._records: dict[int, ProfileRecord] = {}
        self._lock = asyncio.Lock()

    async def get(self, profile_id: int) -> ProfileRecord | None:
        return self._records.get(profile_id)

    async def put(self, record: ProfileRecord) -> None:
        if record.id is None:
            raise ValueError("Profile must have an ID to cache")
        async with self._lock:
            self._records[record.id] = record

    async def invalidate(self, profile_id: int) -> None:
        async with self._lock:
            self._records.pop(profile_id, None)


class DurableProfileCache:
    """Profile cache persisted in the key-value table, survives restarts."""

    KEY_PREFIX = "profile:"

    def __init__(self, store: KeyValueRepository | None = None):
        self.store = store or KeyValueRepository()

    def _key(self, profile_id: int) -> str:
        return f"{self.KEY_PREFIX}{profile_id}"

    async def get(self, profile_id: int) -> ProfileRecord | None:
        data = await self.store.get(self._key(profile_id))
        return ProfileRecord.from_dict(data) if data else None

    async def put(self, record: ProfileRecord) -> None:
        if record.id is None:
            raise ValueError("Profile must have an ID to cache")
        await self.store.set(self._key(record.id), record.to_dict())

    async def invalidate(self, profile_id: int) -> None:
        await self.store.delete(self._key(profile_id))
