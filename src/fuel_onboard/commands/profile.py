"""Profile inspection commands."""

import click

from ..db import ProfileRepository, get_db_path
from .base import async_command, echo_error, echo_info, ensure_initialized, format_table


@click.group()
@click.pass_context
def profile(ctx):
    """Inspect stored profiles."""
    ensure_initialized(ctx)


@profile.command(name="list")
@async_command
async def list_profiles():
    """List all profiles."""
    repo = ProfileRepository(get_db_path())
    records = await repo.list_all()

    if not records:
        echo_info("No profiles found. Start one with 'fuel-onboard onboard'")
        return

    headers = ["ID", "Name", "Goal", "Calories", "Complete"]
    rows = [
        [
            str(r.id),
            r.first_name or "-",
            r.goal_type or "-",
            str(r.daily_calorie_target or "-"),
            "yes" if r.onboarding_complete else "no",
        ]
        for r in records
    ]
    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(records)} profile(s)")


@profile.command()
@click.argument("profile_id", type=int)
@click.pass_context
@async_command
async def show(ctx, profile_id: int):
    """Show every stored field of a profile."""
    repo = ProfileRepository(get_db_path())
    record = await repo.get(profile_id)
    if record is None:
        echo_error(f"Profile ID {profile_id} not found")
        ctx.exit(1)

    click.echo()
    click.echo("=" * 50)
    click.echo(f"Profile {record.id}: {record.first_name or '(unnamed)'}")
    click.echo("=" * 50)
    for key, value in record.to_dict().items():
        if key in ("id", "first_name") or value is None:
            continue
        click.echo(f"  {key}: {value}")
