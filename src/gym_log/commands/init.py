"""Initialize the workout log."""

from pathlib import Path

import click

from ..data.exercise_loader import get_seed_path, seed_exercises
from ..db import get_db_path, init_db
from .base import async_command, echo_info, echo_success, get_data_dir


@click.command()
@click.option(
    "--seed-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Exercise list to seed the catalog from (one name per line, with header)",
)
@async_command
async def init(seed_file: Path | None):
    """Initialize the gym-log database and exercise catalog.

    Safe to run again: the schema is only migrated forward and the catalog
    is seeded once.
    """
    data_dir = get_data_dir()
    db_path = get_db_path(data_dir)

    echo_info(f"Initializing gym-log in {data_dir}")

    await init_db(db_path)
    echo_success("Database initialized")

    seed_path = seed_file or get_seed_path()
    count = await seed_exercises(db_path, seed_path)
    if count:
        echo_success(f"Exercise library populated ({count} exercises from {seed_path.name})")
    else:
        echo_info("Exercise library already populated")

    click.echo()
    click.echo("gym-log is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  gym-log session start --focus push")
    click.echo('  gym-log session add-exercise "Barbell bench press"')
    click.echo("  gym-log set add <session-exercise-id> --weight 60 --reps 8")
