"""CLI entry point for gym-log."""

import logging

import click

from . import __version__
from .commands import exercise, export, init, restore, session, set_group
from .config import get_settings


@click.group()
@click.version_option(version=__version__, prog_name="gym-log")
@click.option("--verbose", "-v", is_flag=True, help="Log storage activity to stderr")
def main(verbose: bool):
    """gym-log: Offline workout logger.

    Sessions, exercises and sets are kept in a local SQLite file.

    Example usage:

        # Create the log and exercise catalog
        gym-log init

        # Start a push day with the template exercises
        gym-log session start --focus push

        # Record a set
        gym-log set add 1 --weight 60 --reps 8

        # Finish and back up
        gym-log session finish
        gym-log export
    """
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register commands
main.add_command(init)
main.add_command(session)
main.add_command(exercise)
main.add_command(set_group)
main.add_command(export)
main.add_command(restore)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
