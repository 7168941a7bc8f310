"""CLI entry point for fuel-onboard."""

import click

from .commands import calories, init, onboard, profile, serve
from .config import settings
from .logging_config import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="fuel-onboard")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """fuel-onboard: onboarding wizard for a nutrition and weight tracker.

    Collects body metrics and goals, works out a safe daily calorie
    target, and completes the user profile.

    Example usage:

        # Initialize the database
        fuel-onboard init

        # Run the wizard
        fuel-onboard onboard

        # Inspect the result
        fuel-onboard profile show 1
    """
    configure_logging("DEBUG" if verbose else settings.log_level)


# Register commands
main.add_command(init)
main.add_command(onboard)
main.add_command(calories)
main.add_command(profile)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
