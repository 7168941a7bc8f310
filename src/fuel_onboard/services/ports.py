"""Call contracts for the stores the onboarding engine talks to.

The SQLite repositories satisfy these; tests substitute in-memory fakes.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from ..models.profile import LegalDocument, ProfileRecord


@runtime_checkable
class ProfileStore(Protocol):
    """Partial-update profile persistence."""

    async def get(self, profile_id: int) -> ProfileRecord | None:
        ...

    async def update(self, profile_id: int, fields: dict) -> ProfileRecord:
        """Write only the given fields; never clobber the others."""
        ...


@runtime_checkable
class WeightLogStore(Protocol):
    async def insert(
        self,
        profile_id: int,
        weighed_at: datetime,
        weight_lb: float,
        body_fat_percent: float | None,
        weight_unit: str,
    ) -> object:
        ...


@runtime_checkable
class LegalStore(Protocol):
    async def fetch_active(self) -> list[LegalDocument]:
        ...

    async def accept(self, profile_id: int, documents: list[LegalDocument]) -> None:
        ...


@runtime_checkable
class ProfileCache(Protocol):
    """A client-side cache of profile records keyed by profile id."""

    async def get(self, profile_id: int) -> ProfileRecord | None:
        ...

    async def put(self, record: ProfileRecord) -> None:
        ...
