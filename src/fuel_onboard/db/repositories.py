"""Data access layer for fuel-onboard."""

import json
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from ..errors import ProfileNotFound
from ..models.profile import PROFILE_FIELDS, LegalAcceptance, LegalDocument, ProfileRecord
from ..models.session import LegalDocType
from .engine import get_db_path


class ProfileRepository:
    """Repository for user profiles."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, first_name: str | None = None) -> int:
        """Create an empty profile row and return its id."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT INTO profiles (first_name) VALUES (?)", (first_name,)
            )
            await db.commit()
            return cursor.lastrowid

    async def get(self, profile_id: int) -> ProfileRecord | None:
        """Get a profile by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM profiles WHERE id = ?", (profile_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return ProfileRecord.from_dict(dict(row))

    async def list_all(self) -> list[ProfileRecord]:
        """List all profiles, most recently updated first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM profiles ORDER BY updated_at DESC, id DESC")
            rows = await cursor.fetchall()
            return [ProfileRecord.from_dict(dict(row)) for row in rows]

    async def update(self, profile_id: int, fields: dict) -> ProfileRecord:
        """Write only the given columns and return the updated record.

        Columns not present in ``fields`` keep their stored values.

        Raises:
            ValueError: If profile_id is missing or a field is not a profile column
            ProfileNotFound: If no profile has this id
        """
        if profile_id is None:
            raise ValueError("Profile must have an ID to update")
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")

        # Column names come from PROFILE_FIELDS, never from user input
        columns = [name for name in PROFILE_FIELDS if name in fields]
        assignments = "".join(f"{name} = ?, " for name in columns)
        values = [fields[name] for name in columns]

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"UPDATE profiles SET {assignments}updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (*values, profile_id),
            )
            if cursor.rowcount == 0:
                raise ProfileNotFound(profile_id)
            await db.commit()
            cursor = await db.execute("SELECT * FROM profiles WHERE id = ?", (profile_id,))
            row = await cursor.fetchone()
            return ProfileRecord.from_dict(dict(row))

    async def delete(self, profile_id: int) -> None:
        """Delete a profile."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
            await db.commit()


class WeightLogRepository:
    """Repository for weigh-ins."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def insert(
        self,
        profile_id: int,
        weighed_at: datetime,
        weight_lb: float,
        body_fat_percent: float | None,
        weight_unit: str,
    ) -> int:
        """Record one weigh-in."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO weight_log
                (profile_id, weighed_at, weight_lb, body_fat_percent, weight_unit)
                VALUES (?, ?, ?, ?, ?)
                """,
                (profile_id, weighed_at.isoformat(), weight_lb, body_fat_percent, weight_unit),
            )
            await db.commit()
            return cursor.lastrowid

    async def list_for_profile(self, profile_id: int) -> list[dict]:
        """Get a profile's weigh-ins, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM weight_log WHERE profile_id = ? ORDER BY weighed_at DESC",
                (profile_id,),
            )
            rows = await cursor.fetchall()
            return [
                {
                    "id": row["id"],
                    "profile_id": row["profile_id"],
                    "weighed_at": row["weighed_at"],
                    "weight_lb": row["weight_lb"],
                    "body_fat_percent": row["body_fat_percent"],
                    "weight_unit": row["weight_unit"],
                }
                for row in rows
            ]


class LegalRepository:
    """Repository for legal documents and their acceptances."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def fetch_active(self) -> list[LegalDocument]:
        """Get the currently active document versions."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM legal_documents WHERE is_active = 1 ORDER BY doc_type, version"
            )
            rows = await cursor.fetchall()
            return [
                LegalDocument(
                    doc_type=LegalDocType(row["doc_type"]),
                    version=row["version"],
                    title=row["title"] or "",
                )
                for row in rows
            ]

    async def add(self, document: LegalDocument, active: bool = True) -> None:
        """Register a document version, optionally retiring older versions of its type."""
        async with aiosqlite.connect(self.db_path) as db:
            if active:
                await db.execute(
                    "UPDATE legal_documents SET is_active = 0 WHERE doc_type = ?",
                    (document.doc_type.value,),
                )
            await db.execute(
                """
                INSERT INTO legal_documents (doc_type, version, title, is_active)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (doc_type, version) DO UPDATE SET
                    title = excluded.title, is_active = excluded.is_active
                """,
                (document.doc_type.value, document.version, document.title, int(active)),
            )
            await db.commit()

    async def accept(self, profile_id: int, documents: list[LegalDocument]) -> None:
        """Record acceptance of each document. Re-accepting is a no-op."""
        accepted_at = datetime.now(timezone.utc).isoformat()
        async with aiosqlite.connect(self.db_path) as db:
            await db.executemany(
                """
                INSERT OR IGNORE INTO user_legal_acceptances
                (profile_id, doc_type, version, accepted_at)
                VALUES (?, ?, ?, ?)
                """,
                [(profile_id, doc.doc_type.value, doc.version, accepted_at) for doc in documents],
            )
            await db.commit()

    async def list_acceptances(self, profile_id: int) -> list[LegalAcceptance]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM user_legal_acceptances WHERE profile_id = ? ORDER BY doc_type",
                (profile_id,),
            )
            rows = await cursor.fetchall()
            return [
                LegalAcceptance(
                    doc_type=LegalDocType(row["doc_type"]),
                    version=row["version"],
                    accepted_at=datetime.fromisoformat(row["accepted_at"]),
                )
                for row in rows
            ]


class KeyValueRepository:
    """JSON values stored by string key in the kv_cache table."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, key: str) -> dict | None:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT value FROM kv_cache WHERE key = ?", (key,))
            row = await cursor.fetchone()
            return json.loads(row[0]) if row else None

    async def set(self, key: str, value: dict) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO kv_cache (key, value) VALUES (?, ?)
                ON CONFLICT (key) DO UPDATE SET
                    value = excluded.value, updated_at = CURRENT_TIMESTAMP
                """,
                (key, json.dumps(value)),
            )
            await db.commit()

    async def delete(self, key: str) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM kv_cache WHERE key = ?", (key,))
            await db.commit()
