"""One-time completion of the onboarding wizard.

Order of operations on ``finalize``:

1. refuse to start while another finalization is running, or once one
   has committed
2. refuse unless every legal checkbox is ticked
3. record acceptance of every active legal document (none active is an
   integrity error)
4. flush the full draft
5. commit the final profile, raced against a deadline
6. refresh the client caches and signal completion

``onboarding_complete`` is only ever written by step 5. Every failure
leaves the orchestrator in ``FAILED_RETRYABLE`` so the user can press
finish again.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum

from ..config import settings
from ..errors import (
    CommitTimeout,
    AlreadyFinalized,
    FinalizationInProgress,
    IntegrityError,
    OnboardingValidationError,
)
from ..models.profile import ProfileRecord
from ..models.session import FocusModule, OnboardingSession, Sex, Timeframe
from ..rules.calories import SOFT_FLOOR_KCAL, estimate_calorie_target
from ..rules.validators import validate_calorie_target, validate_legal
from .draft import build_draft
from .draft_sync import DraftSyncEngine
from .ports import LegalStore, ProfileCache, ProfileStore

logger = logging.getLogger(__name__)


class FinalizationState(str, Enum):
    READY = "ready"
    RUNNING = "running"
    COMMITTED = "committed"
    FAILED_RETRYABLE = "failed_retryable"


class FinalizationOrchestrator:
    """Commits a finished session exactly once."""

    def __init__(
        self,
        profiles: ProfileStore,
        legal: LegalStore,
        sync: DraftSyncEngine,
        caches: list[ProfileCache] | None = None,
        commit_timeout: float | None = None,
        hard_floor: int | None = None,
        soft_floors: dict[Sex, int] | None = None,
        clock: Callable[[], datetime] | None = None,
        on_complete: Callable[[ProfileRecord], None] | None = None,
    ):
        self.profiles = profiles
        self.legal = legal
        self.sync = sync
        self.caches = caches or []
        self.commit_timeout = (
            settings.commit_timeout_seconds if commit_timeout is None else commit_timeout
        )
        self.hard_floor = settings.hard_floor_kcal if hard_floor is None else hard_floor
        self.soft_floors = soft_floors or {
            Sex.MALE: settings.soft_floor_male_kcal,
            Sex.FEMALE: settings.soft_floor_female_kcal,
            Sex.UNKNOWN: SOFT_FLOOR_KCAL[Sex.UNKNOWN],
        }
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.on_complete = on_complete
        self.state = FinalizationState.READY
        self.last_error: Exception | None = None
        self._running = False
        self._late_commits: set[asyncio.Task] = set()

    def build_commit_payload(self, session: OnboardingSession) -> dict:
        """Full, absolute-valued profile update that completes onboarding.

        Applying it twice has the same effect as applying it once.

        Raises:
            OnboardingValidationError: If no acceptable calorie target exists
        """
        payload = build_draft(session)
        now = self.clock()
        if session.goal_timeframe != Timeframe.CUSTOM_DATE:
            payload["goal_target_date"] = None

        target = session.calorie_target
        maintenance = session.maintenance_calories
        if target is None or maintenance is None:
            try:
                estimate = estimate_calorie_target(
                    session, now.date(), self.hard_floor, self.soft_floors
                )
            except ValueError:
                estimate = None
            if estimate is not None:
                target = estimate.result.target_calories if target is None else target
                maintenance = estimate.maintenance_calories if maintenance is None else maintenance

        issue = validate_calorie_target(target, session.calorie_plan, self.hard_floor)
        if issue is not None:
            raise OnboardingValidationError(issue.i18n_key, issue.i18n_params)

        payload["daily_calorie_target"] = int(target)
        if maintenance is not None:
            payload["maintenance_calories"] = int(maintenance)
        payload["onboarding_calorie_set_at"] = now.isoformat()
        if session.focus_targets is not None:
            payload["onboarding_targets_set_at"] = now.isoformat()

        payload["focus_module_1"] = FocusModule.FOOD.value
        modules = list(session.focus_modules) + [None, None]
        payload["focus_module_2"] = modules[0]
        payload["focus_module_3"] = modules[1]

        payload["onboarding_complete"] = True
        return payload

    async def finalize(self, session: OnboardingSession) -> ProfileRecord:
        """Run the finalization sequence.

        Raises:
            FinalizationInProgress: If called while a previous call is running
            AlreadyFinalized: If this session has already been committed
            OnboardingValidationError: If legal boxes are unticked or the
                calorie target is unusable
            IntegrityError: If there are no active legal documents
            FlushError: If the draft could not be saved
            CommitTimeout: If the final commit missed its deadline
        """
        if self.state == FinalizationState.COMMITTED:
            raise AlreadyFinalized(f"Onboarding already completed for profile {session.profile_id}")
        if self._running:
            raise FinalizationInProgress("Finalization already in progress")
        self._running = True
        self.state = FinalizationState.RUNNING
        try:
            record = await self._run(session)
        except Exception as exc:
            self.state = FinalizationState.FAILED_RETRYABLE
            self.last_error = exc
            raise
        finally:
            self._running = False

        self.state = FinalizationState.COMMITTED
        self.last_error = None
        if self.on_complete is not None:
            self.on_complete(record)
        return record

    async def _run(self, session: OnboardingSession) -> ProfileRecord:
        issue = validate_legal(session)
        if issue is not None:
            raise OnboardingValidationError(issue.i18n_key, issue.i18n_params)

        payload = self.build_commit_payload(session)

        documents = await self.legal.fetch_active()
        if not documents:
            logger.error("No active legal documents; refusing to finalize profile %s", session.profile_id)
            raise IntegrityError("No active legal documents found")
        await self.legal.accept(session.profile_id, documents)

        await self.sync.flush(build_draft(session), session.profile_id)

        record = await self._commit(session.profile_id, payload)

        for cache in self.caches:
            await cache.put(record)
        logger.info("Onboarding completed for profile %s", session.profile_id)
        return record

    async def _commit(self, profile_id: int, payload: dict) -> ProfileRecord:
        # Shielded so a slow write can still land after we stop waiting
        commit = asyncio.ensure_future(self.profiles.update(profile_id, payload))
        try:
            return await asyncio.wait_for(asyncio.shield(commit), timeout=self.commit_timeout)
        except asyncio.TimeoutError:
            self._late_commits.add(commit)
            commit.add_done_callback(self._on_late_commit)
            logger.warning(
                "Profile commit for %s timed out after %.1fs", profile_id, self.commit_timeout
            )
            raise CommitTimeout("The service is waking up, please try again") from None

    def _on_late_commit(self, task: asyncio.Task) -> None:
        self._late_commits.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Late profile commit failed: %s", exc)
        else:
            logger.info("Late profile commit landed after timeout")

    async def aclose(self) -> None:
        """Stop waiting on commits that outlived their deadline."""
        for task in list(self._late_commits):
            task.cancel()
        await asyncio.gather(*list(self._late_commits), return_exceptions=True)
