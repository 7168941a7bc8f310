"""Background write-behind of the onboarding draft.

``schedule`` starts a save task and returns immediately; step navigation
never waits on it. Every scheduled or flushed save takes a generation
number, and only the newest generation may write ``SyncState``, so a slow
older save can never overwrite the status of a newer one. At most one
write is in flight per engine; a save waiting for that write is dropped if
a newer generation arrived meanwhile, since each draft carries the full
accumulated state.

``flush`` is the blocking path used before finalization: it waits for any
in-flight write, then re-sends the full current draft and raises
``FlushError`` if the write cannot be confirmed.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum

from ..config import settings
from ..errors import FlushError, SyncError
from ..models.profile import ProfileRecord
from .ports import ProfileStore

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    ERROR = "error"


@dataclass(frozen=True)
class SyncState:
    """Outcome of the most recent save. Replaced, never accumulated."""

    status: SyncStatus = SyncStatus.IDLE
    last_saved_at: datetime | None = None
    last_error: SyncError | None = None
    generation: int = 0

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "last_saved_at": self.last_saved_at.isoformat() if self.last_saved_at else None,
            "last_error": str(self.last_error) if self.last_error else None,
            "generation": self.generation,
        }


class DraftSyncEngine:
    """Schedules, coalesces and flushes draft saves for one session."""

    def __init__(
        self,
        store: ProfileStore,
        debounce_seconds: float | None = None,
        flush_retries: int | None = None,
    ):
        self.store = store
        self.debounce_seconds = (
            settings.draft_debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self.flush_retries = settings.flush_retries if flush_retries is None else flush_retries
        self._state = SyncState()
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()
        self._listeners: list[Callable[[SyncState], None]] = []

    @property
    def state(self) -> SyncState:
        return self._state

    def subscribe(self, listener: Callable[[SyncState], None]) -> None:
        """Call ``listener`` with every new SyncState."""
        self._listeners.append(listener)

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _set_state(self, generation: int, **changes) -> None:
        if not self._is_current(generation):
            return
        self._state = replace(self._state, generation=generation, **changes)
        for listener in self._listeners:
            listener(self._state)

    def schedule(self, draft: dict, owner_id: int, tag: str | None = None) -> asyncio.Task:
        """Start a background save of ``draft``. Never raises for store errors.

        Must be called from a running event loop. The returned task always
        completes normally; failures surface only through ``state``.
        """
        generation = self._next_generation()
        task = asyncio.create_task(
            self._save(generation, dict(draft), owner_id, tag),
            name=f"draft-save-{owner_id}-{tag or generation}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _save(self, generation: int, draft: dict, owner_id: int, tag: str | None) -> None:
        if self.debounce_seconds > 0:
            await asyncio.sleep(self.debounce_seconds)
        else:
            await asyncio.sleep(0)
        if not self._is_current(generation):
            logger.debug("Draft save %s superseded before sending", tag or generation)
            return
        if not draft:
            return

        async with self._write_lock:
            if not self._is_current(generation):
                logger.debug("Draft save %s superseded while waiting to send", tag or generation)
                return
            self._set_state(generation, status=SyncStatus.SAVING)
            try:
                await self.store.update(owner_id, draft)
            except Exception as exc:
                error = SyncError(f"Draft save {tag or generation} failed: {exc}")
                error.__cause__ = exc
                logger.warning("Background draft save failed for profile %s: %s", owner_id, exc)
                self._set_state(generation, status=SyncStatus.ERROR, last_error=error)
                return

        logger.debug("Saved draft fields %s for profile %s", sorted(draft), owner_id)
        self._set_state(
            generation,
            status=SyncStatus.IDLE,
            last_saved_at=datetime.now(timezone.utc),
            last_error=None,
        )

    async def flush(self, draft: dict, owner_id: int) -> ProfileRecord | None:
        """Synchronously persist the full current draft.

        Supersedes every scheduled save and only writes once any save already
        in flight has finished. Retries ``flush_retries`` times.

        Raises:
            FlushError: If the write could not be confirmed
        """
        generation = self._next_generation()
        if not draft:
            self._set_state(generation, status=SyncStatus.IDLE, last_error=None)
            return None

        self._set_state(generation, status=SyncStatus.SAVING)
        attempts = 1 + max(0, self.flush_retries)
        last_exc: Exception | None = None
        async with self._write_lock:
            for attempt in range(1, attempts + 1):
                try:
                    record = await self.store.update(owner_id, dict(draft))
                except Exception as exc:
                    last_exc = exc
                    logger.warning(
                        "Draft flush attempt %d/%d failed for profile %s: %s",
                        attempt,
                        attempts,
                        owner_id,
                        exc,
                    )
                    continue
                self._set_state(
                    generation,
                    status=SyncStatus.IDLE,
                    last_saved_at=datetime.now(timezone.utc),
                    last_error=None,
                )
                return record

        error = FlushError(f"Could not save onboarding data: {last_exc}")
        self._set_state(generation, status=SyncStatus.ERROR, last_error=SyncError(str(last_exc)))
        raise error from last_exc

    async def wait_idle(self) -> None:
        """Wait for every scheduled save task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel outstanding saves."""
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
