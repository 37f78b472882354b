"""Tests for the export projector and restore."""

import csv
import io
import json
from datetime import datetime, timezone

import pytest

from gym_log.db import close_db, init_db
from gym_log.db.repositories import ExerciseRepository, SessionExerciseRepository, SetRepository
from gym_log.services.export import (
    EXPORT_FORMAT_VERSION,
    EXPORT_TABLES,
    build_export_document,
    export_stamp,
    export_tables,
    restore_export,
    rows_to_csv,
    write_export,
)
from gym_log.services.sessions import SessionService


async def _log_two_sessions() -> None:
    await ExerciseRepository().add("Bench press")
    await ExerciseRepository().add("Plank")
    service = SessionService()

    first = await service.create(date="2024-05-01", focus="push", notes='tired, "sore"')
    bench = await SessionExerciseRepository().add(first, "Bench press", position=1)
    await SetRepository().insert(bench, weight=60, weight_unit="kg", reps=8)
    await SetRepository().insert(bench, weight=62.5, reps=6, notes="line one\nline two")
    await service.finish(first)

    second = await service.create(date="2024-05-03", focus="mixed")
    plank = await SessionExerciseRepository().add(second, "Plank")
    await SetRepository().insert(plank, duration_sec=90)


class TestRowsToCsv:
    """Tests for CSV rendering."""

    def test_header_and_nulls(self):
        text = rows_to_csv(["id", "notes"], [{"id": 1, "notes": None}])
        assert text == "id,notes\n1,\n"

    def test_minimal_quoting(self):
        rows = [{"a": 'say "hi"', "b": "x,y", "c": "two\nlines", "d": "plain"}]
        text = rows_to_csv(["a", "b", "c", "d"], rows)

        assert text.splitlines()[1].startswith('"say ""hi""","x,y","two')
        assert text.endswith('lines",plain\n')

    def test_empty_table(self):
        assert rows_to_csv(("id", "name"), []) == "id,name\n"


class TestExportTables:
    """Tests for table dumps."""

    @pytest.mark.asyncio
    async def test_column_order(self, db):
        await _log_two_sessions()
        tables = await export_tables()

        for table in EXPORT_TABLES:
            for row in tables[table.name]:
                assert tuple(row) == table.columns

    @pytest.mark.asyncio
    async def test_schema_aware_adds_measurement_type(self, db):
        await _log_two_sessions()
        tables = await export_tables(schema_aware=True)

        assert list(tables["exercises"][0]) == ["id", "name", "measurement_type", "created_at"]

    @pytest.mark.asyncio
    async def test_row_order(self, db):
        await _log_two_sessions()
        tables = await export_tables()

        assert [r["name"] for r in tables["exercises"]] == ["Bench press", "Plank"]
        assert [r["date"] for r in tables["sessions"]] == ["2024-05-01", "2024-05-03"]
        assert [r["position"] for r in tables["sets"]] == [1, 2, 1]

    @pytest.mark.asyncio
    async def test_values_verbatim(self, db):
        await _log_two_sessions()
        tables = await export_tables()

        first_set = tables["sets"][0]
        assert first_set["weight"] == 60.0
        assert first_set["weight_unit"] == "kg"
        assert isinstance(first_set["created_at"], int)
        assert tables["sets"][1]["weight_unit"] is None
        assert tables["sessions"][0]["status"] == "finished"

    @pytest.mark.asyncio
    async def test_empty_store(self, db):
        tables = await export_tables()
        assert all(rows == [] for rows in tables.values())


class TestExportDocument:
    """Tests for the JSON document."""

    def test_metadata(self):
        moment = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        document = build_export_document({"sessions": []}, exported_at=moment)

        assert document["export_format_version"] == EXPORT_FORMAT_VERSION
        assert document["exported_at"] == "2024-05-01T12:00:00+00:00"
        assert document["db_name"] == "gym_log"
        assert document["db_version"] == 1
        assert list(document["tables"]) == [t.name for t in EXPORT_TABLES]
        assert document["tables"]["sets"] == []

    def test_stamp(self):
        assert export_stamp(datetime(2024, 5, 1, 16, 21, 45)) == "2024-05-01_162145"


class TestWriteExport:
    """Tests for writing export files."""

    @pytest.mark.asyncio
    async def test_files_written(self, db, tmp_path):
        await _log_two_sessions()
        folder = await write_export(tmp_path / "exports")

        assert folder.parent == tmp_path / "exports"
        for table in EXPORT_TABLES:
            text = (folder / f"{table.name}.csv").read_text(encoding="utf-8")
            assert text.splitlines()[0] == ",".join(table.columns)

        sessions = list(csv.DictReader(io.StringIO((folder / "sessions.csv").read_text())))
        assert sessions[0]["notes"] == 'tired, "sore"'
        assert sessions[1]["finished_at"] == ""

        sets = list(csv.DictReader(io.StringIO((folder / "sets.csv").read_text())))
        assert sets[1]["notes"] == "line one\nline two"

        document = json.loads((folder / "export.json").read_text(encoding="utf-8"))
        assert len(document["tables"]["sets"]) == 3


class TestRestore:
    """Tests for restoring an export document."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path, data_dir):
        await init_db(tmp_path / "source.db")
        try:
            await _log_two_sessions()
            original = await export_tables(schema_aware=True)
        finally:
            await close_db()

        await init_db(tmp_path / "target.db")
        try:
            counts = await restore_export(build_export_document(original))
            restored = await export_tables(schema_aware=True)

            assert counts == {
                "sessions": 2,
                "exercises": 2,
                "session_exercises": 2,
                "sets": 3,
            }
            assert restored == original

            # Positions continue after the restored ledger
            bench = original["session_exercises"][0]["id"]
            assert (await SetRepository().insert(bench, reps=5)).position == 3
        finally:
            await close_db()

    @pytest.mark.asyncio
    async def test_refuses_store_with_sessions(self, db):
        await _log_two_sessions()
        document = build_export_document(await export_tables())

        with pytest.raises(ValueError, match="already has sessions"):
            await restore_export(document)

    @pytest.mark.asyncio
    async def test_refuses_unknown_format(self, db):
        with pytest.raises(ValueError, match="format version"):
            await restore_export({"export_format_version": 99, "tables": {}})

    @pytest.mark.asyncio
    async def test_plain_export_gets_default_types(self, db):
        """Catalog rows restored without a type fall back to weight_reps, Bike gets corrected."""
        document = build_export_document(
            {
                "exercises": [
                    {"id": 1, "name": "Bike", "created_at": 1},
                    {"id": 2, "name": "Squat", "created_at": 1},
                ]
            }
        )
        await restore_export(document)

        repo = ExerciseRepository()
        assert await repo.get_measurement_type("Bike") == "time_only"
        assert await repo.get_measurement_type("Squat") == "weight_reps"
