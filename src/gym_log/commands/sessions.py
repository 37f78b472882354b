"""Session lifecycle commands."""

import click

from ..config import get_settings
from ..db.repositories import SessionExerciseRepository
from ..models.sets import describe_set
from ..services.sessions import SessionService
from ..utils.exercise_utils import resolve_exercise_name, session_focus_choices
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
    format_timestamp,
)


async def _session_or_active(ctx: click.Context, service: SessionService, session_id: int | None) -> int:
    """Fall back to the active session when no id is given."""
    if session_id is not None:
        return session_id
    active_id = await service.get_active()
    if active_id is None:
        echo_warning("No active session. Start one with 'gym-log session start'.")
        ctx.exit(1)
    return active_id


@click.group()
@click.pass_context
def session(ctx):
    """Start, finish and inspect workout sessions."""
    ensure_initialized(ctx)


@session.command("start")
@click.option("--date", "session_date", help="Calendar date (YYYY-MM-DD), defaults to today")
@click.option(
    "--focus",
    "-f",
    default="",
    help=f"Session focus: {', '.join(session_focus_choices())} or any label",
)
@click.option("--notes", "-n", default=None, help="Session notes")
@click.option(
    "--template/--no-template",
    default=True,
    help="Preload the template exercises for the focus",
)
@async_command
async def start(session_date: str | None, focus: str, notes: str | None, template: bool):
    """Start a new session and make it the active one."""
    service = SessionService()

    previous = await service.get_active_session()
    if previous is not None and previous.is_active:
        echo_warning(
            f"Session {previous.id} ({previous.focus}, {previous.date}) was not finished; "
            "it is no longer the active session."
        )

    session_id = await service.create(
        date=session_date, focus=focus, notes=notes, preload_template=template
    )
    detail = await service.get_detail(session_id)
    echo_success(f"Started session {session_id}: {detail.focus.upper()} - {detail.date}")

    if template:
        summary = await service.summary(session_id, order="position")
        for item in summary.exercises:
            click.echo(f"  [{item.exercise.id}] {item.exercise.exercise_name}")


@session.command("finish")
@click.argument("session_id", type=int, required=False)
@click.pass_context
@async_command
async def finish(ctx: click.Context, session_id: int | None):
    """Finish a session (the active one by default)."""
    service = SessionService()
    session_id = await _session_or_active(ctx, service, session_id)

    detail = await service.finish(session_id)
    if detail is None:
        echo_error(f"Session {session_id} not found")
        ctx.exit(1)

    echo_success(f"Finished session {session_id} at {format_timestamp(detail.finished_at)}")


@session.command("delete")
@click.argument("session_id", type=int)
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx: click.Context, session_id: int, force: bool):
    """Delete a session with all its exercises and sets."""
    service = SessionService()
    detail = await service.get_detail(session_id)
    if detail is None:
        echo_error(f"Session {session_id} not found")
        ctx.exit(1)

    if not force and not click.confirm(
        f"Delete session {session_id} ({detail.focus}, {detail.date})?"
    ):
        return

    await service.delete(session_id)
    echo_success(f"Deleted session {session_id}")


@session.command("list")
@click.option("--limit", "-l", type=int, default=None, help="Number of sessions to show")
@async_command
async def list_sessions(limit: int | None):
    """List recent sessions."""
    service = SessionService()
    if limit is None:
        limit = get_settings().session_list_limit
    sessions = await service.list_recent(limit)

    if not sessions:
        echo_info("No sessions yet. Start one with 'gym-log session start'")
        return

    active_id = await service.get_active()
    rows = []
    for s in sessions:
        marker = "*" if s.id == active_id else ""
        rows.append([f"{s.id}{marker}", s.date, s.focus, s.status.value, s.notes or ""])

    click.echo()
    click.echo(format_table(["ID", "Date", "Focus", "Status", "Notes"], rows))
    click.echo()
    click.echo(f"Total: {len(sessions)} session(s)")


@session.command("active")
@async_command
async def active():
    """Show the active session id."""
    service = SessionService()
    detail = await service.get_active_session()
    if detail is None:
        echo_info("No active session set.")
        return
    click.echo(f"{detail.id} {detail.focus} {detail.date}")


@session.command("open")
@click.argument("session_id", type=int)
@click.pass_context
@async_command
async def open_session(ctx: click.Context, session_id: int):
    """Select a session; it becomes active again only if not finished."""
    service = SessionService()
    detail = await service.open(session_id)
    if detail is None:
        echo_error(f"Session {session_id} not found")
        ctx.exit(1)

    if detail.is_active:
        echo_success(f"Session {session_id} is now the active session")
    else:
        echo_info(f"Session {session_id} is {detail.status.value}")


@session.command("show")
@click.argument("session_id", type=int, required=False)
@click.option(
    "--order",
    type=click.Choice(["recent", "position"]),
    default="recent",
    help="Exercise order",
)
@click.pass_context
@async_command
async def show(ctx: click.Context, session_id: int | None, order: str):
    """Show a session with its exercises and sets."""
    service = SessionService()
    session_id = await _session_or_active(ctx, service, session_id)

    summary = await service.summary(session_id, order=order)
    if summary is None:
        echo_error(f"Session {session_id} not found")
        ctx.exit(1)

    s = summary.session
    click.echo()
    click.echo(click.style(f"{s.focus.upper()} - {s.date}", bold=True))
    click.echo(f"Status: {s.get_status_display()}" + (" (active)" if summary.is_active else ""))
    if s.notes:
        click.echo(f"Notes: {s.notes}")
    click.echo()

    if not summary.exercises:
        echo_info("No exercises added yet.")
        return

    for item in summary.exercises:
        ex = item.exercise
        note = f" - {ex.notes}" if ex.notes else ""
        click.echo(f"[{ex.id}] {ex.exercise_name} ({ex.measurement_type.value}){note}")
        if not item.sets:
            click.echo("    No sets yet.")
        for workout_set in item.sets:
            click.echo(f"    {describe_set(workout_set, ex.measurement_type)}  (set {workout_set.id})")


@session.command("add-exercise")
@click.argument("name")
@click.option("--session", "-s", "session_id", type=int, help="Session id (defaults to active)")
@click.option("--notes", "-n", default=None, help="Notes for this exercise")
@click.option("--resolve-alias", is_flag=True, help="Map template wording to the catalog name")
@click.pass_context
@async_command
async def add_exercise(
    ctx: click.Context,
    name: str,
    session_id: int | None,
    notes: str | None,
    resolve_alias: bool,
):
    """Add an exercise to a session."""
    service = SessionService()
    session_id = await _session_or_active(ctx, service, session_id)

    if resolve_alias:
        name = resolve_exercise_name(name) or ""
    if not name.strip():
        echo_error("Exercise name cannot be blank")
        ctx.exit(1)

    if await service.get_detail(session_id) is None:
        echo_error(f"Session {session_id} not found")
        ctx.exit(1)

    repo = SessionExerciseRepository()
    session_exercise_id = await repo.add(session_id, name, notes=notes)
    echo_success(f"Added {name.strip()} to session {session_id} (id {session_exercise_id})")


@session.command("remove-exercise")
@click.argument("session_exercise_id", type=int)
@click.pass_context
@async_command
async def remove_exercise(ctx: click.Context, session_exercise_id: int):
    """Remove an exercise (and its sets) from its session."""
    repo = SessionExerciseRepository()
    if not await repo.delete(session_exercise_id):
        echo_error(f"Session exercise {session_exercise_id} not found")
        ctx.exit(1)
    echo_success(f"Removed session exercise {session_exercise_id}")
