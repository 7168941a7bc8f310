"""Interactive onboarding wizard command."""

import click
import questionary

from ..config import settings
from ..db import LegalRepository, ProfileRepository, WeightLogRepository, get_db_path
from ..db.repositories import KeyValueRepository
from ..errors import CommitTimeout, FlushError, IntegrityError, OnboardingValidationError
from ..models.session import OnboardingSession
from ..prompts import StepPrompter, custom_style
from ..rules.issue import ValidationIssue
from ..services import (
    DraftSyncEngine,
    DurableProfileCache,
    FinalizationOrchestrator,
    MemoryProfileCache,
    StepSequencer,
    SyncState,
    SyncStatus,
    resume_session,
)
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_issue,
)


def _report_sync(state: SyncState) -> None:
    if state.status == SyncStatus.ERROR:
        echo_warning(f"Draft not saved yet: {state.last_error}")


@click.command()
@click.option("--profile-id", type=int, default=None, help="Resume onboarding for an existing profile")
@click.option(
    "--constrained-host",
    is_flag=True,
    help="Skip the plan step (plans are sold by the host)",
)
@click.pass_context
@async_command
async def onboard(ctx, profile_id: int | None, constrained_host: bool):
    """Run the onboarding wizard.

    Walks through every step, saving progress in the background, then
    records legal acceptance and completes the profile.
    """
    ensure_initialized(ctx)
    db_path = get_db_path()
    profiles = ProfileRepository(db_path)
    constrained_host = constrained_host or settings.constrained_host

    if profile_id is None:
        profile_id = await profiles.create()
        echo_info(f"Created profile {profile_id}")
        session = OnboardingSession(profile_id=profile_id, constrained_host=constrained_host)
    else:
        record = await profiles.get(profile_id)
        if record is None:
            echo_error(f"Profile ID {profile_id} not found")
            ctx.exit(1)
        if record.onboarding_complete:
            echo_info(f"Profile {profile_id} has already completed onboarding")
            return
        session = resume_session(record, constrained_host=constrained_host)
        echo_info(f"Resuming onboarding for profile {profile_id}")

    sync = DraftSyncEngine(profiles)
    sync.subscribe(_report_sync)
    sequencer = StepSequencer(sync, weight_log=WeightLogRepository(db_path))
    prompter = StepPrompter()

    try:
        session = await _run_steps(session, sequencer, prompter)
        await sequencer.wait_background()
        await sync.wait_idle()
        await _finalize(ctx, session, profiles, sync, db_path)
    finally:
        await sync.aclose()


async def _run_steps(
    session: OnboardingSession, sequencer: StepSequencer, prompter: StepPrompter
) -> OnboardingSession:
    """Prompt and advance until the last step has valid answers."""
    while True:
        if session.current_step > 1:
            if await prompter.navigate(session) == "back":
                session = sequencer.retreat(session)
                continue

        session = session.apply(await prompter.ask(session, sequencer.offer(session)))

        if session.current_step == session.total_steps:
            issue = sequencer.check(session)
            if issue is None:
                return session
            echo_error(format_issue(issue))
            continue

        outcome = sequencer.advance(session)
        if outcome.issue is not None:
            echo_error(format_issue(outcome.issue))
            continue
        session = outcome.session


async def _finalize(ctx, session, profiles, sync, db_path) -> None:
    orchestrator = FinalizationOrchestrator(
        profiles,
        LegalRepository(db_path),
        sync,
        caches=[MemoryProfileCache(), DurableProfileCache(KeyValueRepository(db_path))],
    )
    try:
        while True:
            try:
                record = await orchestrator.finalize(session)
                break
            except (CommitTimeout, FlushError) as e:
                echo_warning(str(e))
                retry = await questionary.confirm(
                    "Try finishing again?", default=True, style=custom_style
                ).ask_async()
                if not retry:
                    echo_info("Progress is saved. Resume later with --profile-id.")
                    ctx.exit(1)
            except OnboardingValidationError as e:
                echo_error(format_issue(ValidationIssue(e.i18n_key, e.i18n_params)))
                ctx.exit(1)
            except IntegrityError as e:
                echo_error(f"{e}. Run 'fuel-onboard init' to seed legal documents.")
                ctx.exit(1)
    finally:
        await orchestrator.aclose()

    click.echo()
    echo_success(f"Onboarding complete for {record.first_name} (profile {record.id})")
    click.echo(f"  Daily calorie target: {record.daily_calorie_target} kcal")
    modules = [m for m in (record.focus_module_1, record.focus_module_2, record.focus_module_3) if m]
    click.echo(f"  Home modules: {', '.join(modules)}")
