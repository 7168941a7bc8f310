"""Database layer for fuel-onboard."""

from .engine import get_db_path, init_db, seed_legal_documents
from .repositories import (
    KeyValueRepository,
    LegalRepository,
    ProfileRepository,
    WeightLogRepository,
)

__all__ = [
    "get_db_path",
    "init_db",
    "KeyValueRepository",
    "LegalRepository",
    "ProfileRepository",
    "seed_legal_documents",
    "WeightLogRepository",
]
