"""The onboarding wizard state machine.

Transitions are a declarative edge table (``build_step_graph``). Advancing
is gated by the leaving step's validator; on success the leave handlers
produce a session delta, the sequencer applies it, rebuilds the draft and
hands it to the background sync engine without waiting for the save.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from ..config import settings
from ..models.session import OnboardingSession, Sex, Step
from ..rules.calories import SOFT_FLOOR_KCAL, estimate_calorie_target
from ..rules.goal_weight import get_suggested_target_weight_lb
from ..rules.issue import ValidationIssue
from ..rules.nutrients import suggest_focus_targets
from ..rules.validators import validate_step
from .draft import build_draft
from .draft_sync import DraftSyncEngine
from .ports import WeightLogStore

logger = logging.getLogger(__name__)

TOTAL_STEPS = len(Step)


@dataclass(frozen=True)
class StepEdge:
    """Where a step goes on forward and on back."""

    forward: int
    back: int


def build_step_graph(
    total_steps: int = TOTAL_STEPS, plan_step: int = Step.PLAN, skip_plan: bool = False
) -> dict[int, StepEdge]:
    """Build the edge table for a session.

    With ``skip_plan`` the plan step is unreachable in both directions:
    the step before it goes forward two, the step after it goes back two.
    The number of steps never changes.
    """
    if total_steps < 1:
        raise ValueError("total_steps must be at least 1")
    graph = {}
    for step in range(1, total_steps + 1):
        forward = min(step + 1, total_steps)
        back = max(step - 1, 1)
        if skip_plan:
            if forward == plan_step and plan_step < total_steps:
                forward = plan_step + 1
            if back == plan_step and plan_step > 1:
                back = plan_step - 1
        graph[step] = StepEdge(forward=forward, back=back)
    return graph


@dataclass
class StepOutcome:
    """Result of one advance attempt."""

    session: OnboardingSession
    advanced: bool
    issue: ValidationIssue | None = None
    delta: dict = field(default_factory=dict)
    draft: dict | None = None
    sync_task: asyncio.Task | None = None

    @property
    def step(self) -> int:
        return self.session.current_step


StepHandler = Callable[["StepSequencer", OnboardingSession, date], dict]


class StepSequencer:
    """Drives one session through the wizard."""

    def __init__(
        self,
        sync: DraftSyncEngine,
        weight_log: WeightLogStore | None = None,
        plan_step: int = Step.PLAN,
        hard_floor: int | None = None,
        soft_floors: dict[Sex, int] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.sync = sync
        self.weight_log = weight_log
        self.plan_step = plan_step
        self.hard_floor = settings.hard_floor_kcal if hard_floor is None else hard_floor
        self.soft_floors = soft_floors or {
            Sex.MALE: settings.soft_floor_male_kcal,
            Sex.FEMALE: settings.soft_floor_female_kcal,
            Sex.UNKNOWN: SOFT_FLOOR_KCAL[Sex.UNKNOWN],
        }
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.last_weight_log_error: Exception | None = None
        self._background: set[asyncio.Task] = set()

    def graph_for(self, session: OnboardingSession) -> dict[int, StepEdge]:
        return build_step_graph(session.total_steps, self.plan_step, session.constrained_host)

    def next_step(self, session: OnboardingSession) -> int:
        return self.graph_for(session)[session.current_step].forward

    def previous_step(self, session: OnboardingSession) -> int:
        return self.graph_for(session)[session.current_step].back

    def check(self, session: OnboardingSession) -> ValidationIssue | None:
        """Validation issue blocking the current step, if any."""
        return validate_step(session.current_step, session, self.clock().date(), self.hard_floor)

    def can_advance(self, session: OnboardingSession) -> bool:
        return self.check(session) is None

    def advance(self, session: OnboardingSession, tag: str | None = None) -> StepOutcome:
        """Validate, apply step handlers, move forward and schedule a draft save.

        Must be called from a running event loop. The last step is a
        no-op; only finalization leaves it.
        """
        if session.current_step >= session.total_steps:
            return StepOutcome(session=session, advanced=False)

        issue = self.check(session)
        if issue is not None:
            logger.debug("Step %d blocked: %s", session.current_step, issue.i18n_key)
            return StepOutcome(session=session, advanced=False, issue=issue)

        today = self.clock().date()
        delta: dict = {}
        leave = LEAVE_HANDLERS.get(session.current_step)
        if leave:
            delta.update(leave(self, session, today))

        delta["current_step"] = self.next_step(session)
        moved = session.apply(delta)

        draft = build_draft(moved)
        task = self.sync.schedule(draft, moved.profile_id, tag or f"step-{session.current_step}")
        return StepOutcome(
            session=moved, advanced=True, delta=delta, draft=draft, sync_task=task
        )

    def retreat(self, session: OnboardingSession) -> OnboardingSession:
        """Move back one step (two across a skipped step). Never gated."""
        return session.apply({"current_step": self.previous_step(session)})

    def offer(self, session: OnboardingSession):
        """Suggestion to pre-fill the current step, or None.

        Suggestions are only offered; nothing is written to the session or
        the draft until the user accepts them and advances.
        """
        today = self.clock().date()
        step = session.current_step
        if step == Step.GOAL_WEIGHT:
            current_lb = session.parsed_weight_lb
            if current_lb is None or not session.goal_type:
                return None
            try:
                return get_suggested_target_weight_lb(
                    session.goal_type,
                    current_lb,
                    session.parsed_height_cm,
                    session.sex or None,
                    session.date_of_birth or None,
                    today,
                )
            except ValueError as exc:
                logger.debug("No goal weight suggestion: %s", exc)
                return None
        if step == Step.CALORIE_TARGET:
            try:
                return estimate_calorie_target(session, today, self.hard_floor, self.soft_floors)
            except ValueError as exc:
                logger.debug("No calorie estimate yet: %s", exc)
                return None
        if step == Step.FOCUS_TARGETS:
            current_lb = session.parsed_weight_lb
            if current_lb is None or not session.activity_level:
                return None
            return suggest_focus_targets(
                session.parsed_goal_weight_lb or current_lb,
                current_lb,
                session.sex or Sex.UNKNOWN,
                session.activity_level,
            )
        return None

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _log_weight(self, session: OnboardingSession, weighed_at: datetime) -> None:
        weight_lb = session.parsed_weight_lb
        try:
            await self.weight_log.insert(
                session.profile_id,
                weighed_at,
                round(weight_lb, 3),
                session.parsed_body_fat,
                session.weight_unit.value,
            )
        except Exception as exc:
            # The weight still reaches the profile through the draft
            self.last_weight_log_error = exc
            logger.warning(
                "Weight log insert failed for profile %s, relying on draft: %s",
                session.profile_id,
                exc,
            )
            return
        self.last_weight_log_error = None

    async def wait_background(self) -> None:
        """Wait for fire-and-forget side tasks such as the weight-log insert."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)


def _leave_current_weight(seq: StepSequencer, session: OnboardingSession, today: date) -> dict:
    if seq.weight_log is not None:
        seq._spawn(seq._log_weight(session, seq.clock()))
    return {}


def _leave_calorie_target(seq: StepSequencer, session: OnboardingSession, today: date) -> dict:
    if session.maintenance_calories is not None:
        return {}
    try:
        estimate = estimate_calorie_target(session, today, seq.hard_floor, seq.soft_floors)
    except ValueError:
        return {}
    return {"maintenance_calories": estimate.maintenance_calories}


LEAVE_HANDLERS: dict[int, StepHandler] = {
    Step.CURRENT_WEIGHT: _leave_current_weight,
    Step.CALORIE_TARGET: _leave_calorie_target,
}
