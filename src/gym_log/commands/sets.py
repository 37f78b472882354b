"""Set logging commands."""

import aiosqlite
import click

from ..db.repositories import SessionExerciseRepository, SetRepository
from ..models.sets import describe_set, format_duration, parse_duration
from ..services.sessions import SessionService
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    format_timestamp,
)


@click.group("set")
@click.pass_context
def set_group(ctx):
    """Record, list and delete sets."""
    ensure_initialized(ctx)


@set_group.command("add")
@click.argument("session_exercise_id", type=int)
@click.option("--weight", "-w", default=None, help="Weight lifted")
@click.option("--unit", "-u", "weight_unit", default=None, help="Weight unit, e.g. kg or lb")
@click.option("--reps", "-r", default=None, help="Repetitions")
@click.option("--duration", "-d", default=None, help="Duration as ss, m:ss or h:mm:ss")
@click.option("--distance", default=None, help="Distance in meters")
@click.option("--assisted", is_flag=True, help="Machine or band assisted")
@click.option("--notes", "-n", default=None, help="Free-text notes")
@click.pass_context
@async_command
async def add(
    ctx: click.Context,
    session_exercise_id: int,
    weight: str | None,
    weight_unit: str | None,
    reps: str | None,
    duration: str | None,
    distance: str | None,
    assisted: bool,
    notes: str | None,
):
    """Record the next set for a session exercise."""
    session_exercise = await SessionExerciseRepository().get(session_exercise_id)
    if session_exercise is None:
        echo_error(f"Session exercise {session_exercise_id} not found")
        ctx.exit(1)

    repo = SetRepository()
    try:
        workout_set = await repo.insert(
            session_exercise_id,
            weight=weight,
            weight_unit=weight_unit,
            reps=reps,
            duration_sec=parse_duration(duration),
            distance_m=distance,
            assisted=assisted,
            notes=notes,
        )
    except ValueError as e:
        echo_error(str(e))
        ctx.exit(1)
    except aiosqlite.IntegrityError as e:
        echo_error(f"Could not record set: {e}")
        ctx.exit(1)

    echo_success(
        f"{session_exercise.exercise_name} "
        f"{describe_set(workout_set, session_exercise.measurement_type)} (set {workout_set.id})"
    )


@set_group.command("list")
@click.argument("session_exercise_id", type=int)
@click.pass_context
@async_command
async def list_sets(ctx: click.Context, session_exercise_id: int):
    """List the sets of a session exercise in recorded order."""
    session_exercise = await SessionExerciseRepository().get(session_exercise_id)
    if session_exercise is None:
        echo_error(f"Session exercise {session_exercise_id} not found")
        ctx.exit(1)

    sets = await SetRepository().list_for(session_exercise_id)
    click.echo(
        f"{session_exercise.exercise_name} ({session_exercise.measurement_type.value})"
    )
    if not sets:
        echo_info("No sets yet.")
        return

    rows = []
    for s in sets:
        rows.append([
            str(s.id),
            str(s.position),
            "" if s.weight is None else f"{s.weight:g}",
            s.weight_unit or "",
            "" if s.reps is None else str(s.reps),
            "" if s.duration_sec is None else format_duration(s.duration_sec),
            "" if s.distance_m is None else f"{s.distance_m:g}",
            "yes" if s.assisted else "",
            s.notes or "",
            format_timestamp(s.created_at),
        ])
    click.echo(format_table(
        ["ID", "#", "Weight", "Unit", "Reps", "Time", "Dist", "Assist", "Notes", "Logged"],
        rows,
    ))


@set_group.command("delete")
@click.argument("set_id", type=int)
@click.pass_context
@async_command
async def delete(ctx: click.Context, set_id: int):
    """Delete one set. Positions of the other sets are unchanged."""
    if not await SetRepository().delete(set_id):
        echo_error(f"Set {set_id} not found")
        ctx.exit(1)
    echo_success(f"Deleted set {set_id}")


@set_group.command("suggest")
@click.argument("exercise_name")
@async_command
async def suggest(exercise_name: str):
    """Show the last set and best weight logged for an exercise."""
    suggestion = await SessionService().suggest_set(exercise_name)

    click.echo(f"{suggestion.exercise_name} ({suggestion.measurement_type.value})")
    if suggestion.latest is None:
        echo_info("No sets logged yet.")
        return

    click.echo(f"  Last: {describe_set(suggestion.latest, suggestion.measurement_type)}")
    if suggestion.personal_best is not None:
        click.echo(f"  Best: {suggestion.personal_best:g}")
