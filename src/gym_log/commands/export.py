"""Export and restore commands."""

import json
from pathlib import Path

import click

from ..config import get_settings
from ..services.export import (
    EXPORT_TABLES,
    build_export_document,
    columns_for,
    export_tables,
    restore_export,
    rows_to_csv,
    write_export,
)
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized


@click.command()
@click.option(
    "--output",
    "-o",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Folder to write the export into (a timestamped subfolder is created)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["files", "json", "csv"]),
    default="files",
    help="Write files, or print JSON / one table's CSV to stdout",
)
@click.option(
    "--table",
    "-t",
    type=click.Choice([t.name for t in EXPORT_TABLES]),
    default="sessions",
    help="Table to print with --format csv",
)
@click.option(
    "--schema-aware",
    is_flag=True,
    help="Include exercises.measurement_type",
)
@click.pass_context
@async_command
async def export(
    ctx,
    out_dir: Path | None,
    output_format: str,
    table: str,
    schema_aware: bool,
):
    """Export every table as CSV plus a single JSON document.

    Values are written verbatim: timestamps stay epoch milliseconds and
    weights keep their recorded unit.

    Examples:
        # Write CSVs and export.json under the data folder
        gym-log export

        # Choose the destination
        gym-log export -o ~/backups

        # Print the JSON document
        gym-log export --format json
    """
    ensure_initialized(ctx)

    if output_format == "files":
        if out_dir is None:
            out_dir = get_settings().resolved_export_dir
        folder = await write_export(out_dir, schema_aware=schema_aware)
        echo_success(f"Exported to {folder}")
        for t in EXPORT_TABLES:
            click.echo(f"  {t.name}.csv")
        click.echo("  export.json")
        return

    tables = await export_tables(schema_aware=schema_aware)
    if output_format == "json":
        click.echo(json.dumps(build_export_document(tables), indent=2))
    else:
        export_table = next(t for t in EXPORT_TABLES if t.name == table)
        columns = columns_for(export_table, schema_aware)
        click.echo(rows_to_csv(columns, tables[table]), nl=False)


@click.command()
@click.argument("export_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
@async_command
async def restore(ctx, export_file: Path):
    """Restore an export.json into a log that has no sessions yet."""
    ensure_initialized(ctx)

    try:
        document = json.loads(export_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        echo_error(f"{export_file} is not valid JSON: {e}")
        ctx.exit(1)

    try:
        counts = await restore_export(document)
    except ValueError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success(f"Restored from {export_file}")
    for name, count in counts.items():
        echo_info(f"{name}: {count} row(s)")
