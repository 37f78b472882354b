"""Shared CLI utilities."""

import asyncio
from datetime import datetime
from functools import wraps
from pathlib import Path

import click

from ..config import get_settings
from ..db import close_db, get_db_path


def async_command(f):
    """Decorator to run async Click commands.

    The shared connection is closed when the command returns, which is the
    end of the process for a CLI invocation.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        async def run():
            try:
                return await f(*args, **kwargs)
            finally:
                await close_db()

        return asyncio.run(run())

    return wrapper


def get_data_dir() -> Path:
    """Get the data directory path."""
    return Path(get_settings().data_dir).expanduser()


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = get_db_path(get_data_dir())
    if not db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Log not initialized. Run 'gym-log init' first."
        )
        ctx.exit(1)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    # Calculate column widths
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = []

    header_line = ""
    for i, h in enumerate(headers):
        header_line += h.ljust(widths[i] + padding)
    lines.append(header_line.rstrip())

    sep_line = ""
    for w in widths:
        sep_line += "-" * w + " " * padding
    lines.append(sep_line.rstrip())

    for row in rows:
        row_line = ""
        for i, cell in enumerate(row):
            row_line += str(cell).ljust(widths[i] + padding)
        lines.append(row_line.rstrip())

    return "\n".join(lines)


def format_timestamp(millis: int | None) -> str:
    """Render an epoch-millis timestamp for display."""
    if millis is None:
        return "-"
    return datetime.fromtimestamp(millis / 1000).strftime("%Y-%m-%d %H:%M")
