"""Database engine setup and initialization."""

import logging
from pathlib import Path

import aiosqlite

from ..config import settings
from ..models.session import LegalDocType

logger = logging.getLogger(__name__)

DEFAULT_LEGAL_DOCUMENTS = (
    (LegalDocType.TERMS, "1", "Terms of Service"),
    (LegalDocType.PRIVACY, "1", "Privacy Policy"),
    (LegalDocType.HEALTH_DISCLAIMER, "1", "Health Disclaimer"),
)


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path, creating the data directory if needed."""
    if data_dir is None:
        data_dir = settings.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / settings.db_filename


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                first_name TEXT,
                date_of_birth TEXT,
                gender TEXT,
                height_cm REAL,
                height_unit TEXT,
                activity_level TEXT,
                weight_lb REAL,
                weight_unit TEXT,
                body_fat_percent REAL,
                goal_type TEXT,
                goal_weight_lb REAL,
                goal_timeframe TEXT,
                goal_target_date TEXT,
                daily_calorie_target INTEGER,
                maintenance_calories INTEGER,
                calorie_plan TEXT,
                onboarding_calorie_set_at TEXT,
                protein_g_min INTEGER,
                fiber_g_min INTEGER,
                carbs_g_max INTEGER,
                sugar_g_max INTEGER,
                sodium_mg_max INTEGER,
                water_goal_ml INTEGER,
                onboarding_targets_set_at TEXT,
                focus_module_1 TEXT,
                focus_module_2 TEXT,
                focus_module_3 TEXT,
                plan TEXT,
                onboarding_complete INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                CHECK (weight_lb IS NULL OR (weight_lb >= 45 AND weight_lb <= 880)),
                CHECK (goal_weight_lb IS NULL OR (goal_weight_lb >= 45 AND goal_weight_lb <= 880))
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS weight_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                profile_id INTEGER NOT NULL,
                weighed_at TIMESTAMP NOT NULL,
                weight_lb REAL NOT NULL,
                body_fat_percent REAL,
                weight_unit TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (profile_id) REFERENCES profiles(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS legal_documents (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                doc_type TEXT NOT NULL,
                version TEXT NOT NULL,
                title TEXT DEFAULT '',
                is_active INTEGER DEFAULT 1,
                UNIQUE (doc_type, version)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS user_legal_acceptances (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                profile_id INTEGER NOT NULL,
                doc_type TEXT NOT NULL,
                version TEXT NOT NULL,
                accepted_at TIMESTAMP NOT NULL,
                UNIQUE (profile_id, doc_type, version),
                FOREIGN KEY (profile_id) REFERENCES profiles(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS kv_cache (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_weight_log_profile
            ON weight_log(profile_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_legal_acceptances_profile
            ON user_legal_acceptances(profile_id)
        """)

        await db.commit()
    logger.debug("Schema ready at %s", db_path)


async def seed_legal_documents(db_path: Path | None = None) -> int:
    """Seed the default active legal documents. Returns rows inserted."""
    if db_path is None:
        db_path = get_db_path()

    inserted = 0
    async with aiosqlite.connect(db_path) as db:
        for doc_type, version, title in DEFAULT_LEGAL_DOCUMENTS:
            cursor = await db.execute(
                """
                INSERT OR IGNORE INTO legal_documents (doc_type, version, title, is_active)
                VALUES (?, ?, ?, 1)
                """,
                (doc_type.value, version, title),
            )
            inserted += cursor.rowcount
        await db.commit()
    return inserted
