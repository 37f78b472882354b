"""Exercise catalog commands."""

import aiosqlite
import click

from ..config import get_settings
from ..db.repositories import ExerciseRepository
from ..models.exercises import MeasurementType
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
)

MEASUREMENT_CHOICES = [mt.value for mt in MeasurementType]


@click.group()
@click.pass_context
def exercise(ctx):
    """Browse and classify the exercise catalog."""
    ensure_initialized(ctx)


@exercise.command("list")
@click.option("--search", "-s", "query", default="", help="Filter by name (case-insensitive)")
@click.option("--limit", "-l", type=int, default=None, help="Maximum entries to show")
@async_command
async def list_exercises(query: str, limit: int | None):
    """List catalog entries by name."""
    repo = ExerciseRepository()
    if limit is None:
        limit = get_settings().exercise_list_limit

    if query.strip():
        exercises = await repo.search(query, limit=limit)
    else:
        exercises = await repo.list_all(limit=limit)

    if not exercises:
        echo_info("No exercises found.")
        return

    rows = [[str(e.id), e.name, e.measurement_type.value] for e in exercises]
    click.echo(format_table(["ID", "Name", "Measurement"], rows))
    click.echo()
    click.echo(f"Total: {len(exercises)} exercise(s)")


@exercise.command("add")
@click.argument("name")
@click.option(
    "--type",
    "measurement_type",
    type=click.Choice(MEASUREMENT_CHOICES),
    default=MeasurementType.WEIGHT_REPS.value,
    help="How sets of this exercise are measured",
)
@click.pass_context
@async_command
async def add(ctx: click.Context, name: str, measurement_type: str):
    """Add an exercise to the catalog."""
    repo = ExerciseRepository()
    try:
        exercise_id = await repo.add(name, MeasurementType(measurement_type))
    except ValueError as e:
        echo_error(str(e))
        ctx.exit(1)
    except aiosqlite.IntegrityError:
        echo_error(f"Exercise '{name.strip()}' already exists")
        ctx.exit(1)

    echo_success(f"Added '{name.strip()}' ({measurement_type}) with id {exercise_id}")


@exercise.command("classify")
@click.argument("name")
@click.argument("measurement_type", type=click.Choice(MEASUREMENT_CHOICES))
@click.pass_context
@async_command
async def classify(ctx: click.Context, name: str, measurement_type: str):
    """Change how an exercise's sets are measured."""
    repo = ExerciseRepository()
    updated = await repo.set_measurement_type(name, measurement_type)
    if not updated:
        echo_error(f"Exercise '{name}' is not in the catalog")
        ctx.exit(1)
    echo_success(f"'{name}' is now measured as {measurement_type}")
