"""End-to-end scenarios against a file-backed store.

Each step opens the store, does its work and closes it again, the way
separate CLI invocations do.
"""

import json

import pytest

from gym_log.data.exercise_loader import seed_exercises
from gym_log.db import close_db, get_db_path, init_db
from gym_log.db.repositories import ExerciseRepository, SessionExerciseRepository, SetRepository
from gym_log.models.exercises import MeasurementType
from gym_log.models.sets import describe_set
from gym_log.services.export import export_tables, restore_export, write_export
from gym_log.services.sessions import SessionService


class TestTrainingWeek:
    """A week of logging survives restarts, export and restore."""

    @pytest.mark.asyncio
    async def test_week_round_trip(self, store_dir, tmp_path):
        db_path = get_db_path(store_dir)

        # First start: schema and catalog
        await init_db(db_path)
        catalog_size = await seed_exercises()
        assert catalog_size > 40
        await close_db()

        # Monday: push day from the template
        await init_db(db_path)
        service = SessionService()
        monday = await service.create(date="2024-05-06", focus="push", preload_template=True)
        exercises = await SessionExerciseRepository().list_for_session(monday, order="position")
        press = exercises[0]
        for reps in (10, 9, 8):
            await SetRepository().insert(press.id, weight="22.5", weight_unit="kg", reps=reps)
        await service.finish(monday)
        await close_db()

        # Wednesday: cardio on the bike, which the catalog reads as time only
        await init_db(db_path)
        service = SessionService()
        assert await service.get_active() is None
        wednesday = await service.create(date="2024-05-08", focus="cardio")
        bike = await SessionExerciseRepository().add(wednesday, "Bike")
        await SetRepository().insert(bike, duration_sec=1200)
        await close_db()

        # Restart mid-session: still active, seed not re-applied
        await init_db(db_path)
        service = SessionService()
        assert await service.get_active() == wednesday
        assert await seed_exercises() == 0
        assert await ExerciseRepository().count() == catalog_size

        summary = await service.summary(wednesday)
        item = summary.exercises[0]
        assert item.exercise.measurement_type == MeasurementType.TIME_ONLY
        assert describe_set(item.sets[0], item.exercise.measurement_type) == "#1: 20:00"
        await service.finish(wednesday)

        # Export
        folder = await write_export(tmp_path / "exports", schema_aware=True)
        original = await export_tables(schema_aware=True)
        await close_db()

        document = json.loads((folder / "export.json").read_text(encoding="utf-8"))
        assert [s["date"] for s in document["tables"]["sessions"]] == ["2024-05-06", "2024-05-08"]
        assert [s["reps"] for s in document["tables"]["sets"]][:3] == [10, 9, 8]

        # Restore onto a new device
        await init_db(tmp_path / "new_device.db")
        try:
            await seed_exercises()
            await restore_export(document)
            assert await export_tables(schema_aware=True) == original

            suggestion = await SessionService().suggest_set(press.exercise_name)
            assert suggestion.latest.reps == 8
            assert suggestion.personal_best == 22.5
        finally:
            await close_db()
