"""Onboarding orchestration services."""

from .cache import DurableProfileCache, MemoryProfileCache
from .draft import build_draft, resume_session
from .draft_sync import DraftSyncEngine, SyncState, SyncStatus
from .finalize import FinalizationOrchestrator, FinalizationState
from .sequencer import StepEdge, StepOutcome, StepSequencer, build_step_graph

__all__ = [
    "build_draft",
    "build_step_graph",
    "DraftSyncEngine",
    "DurableProfileCache",
    "FinalizationOrchestrator",
    "FinalizationState",
    "MemoryProfileCache",
    "resume_session",
    "StepEdge",
    "StepOutcome",
    "StepSequencer",
    "SyncState",
    "SyncStatus",
]
