"""Initialize database command."""

import click

from ..config import settings
from ..db import get_db_path, init_db, seed_legal_documents
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the fuel-onboard data directory and database.

    Creates the SQLite schema and seeds the active legal documents
    (terms, privacy policy, health disclaimer) that users accept at the
    end of onboarding.
    """
    data_dir = settings.data_dir
    echo_info(f"Initializing fuel-onboard in {data_dir}")

    db_path = get_db_path(data_dir)
    await init_db(db_path)
    echo_success("Database initialized")

    inserted = await seed_legal_documents(db_path)
    if inserted:
        echo_success(f"Seeded {inserted} legal document(s)")
    else:
        echo_info("Legal documents already present")

    click.echo()
    click.echo("fuel-onboard is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  fuel-onboard onboard          # Run the onboarding wizard")
    click.echo("  fuel-onboard calories --help  # Try the calorie calculator")
