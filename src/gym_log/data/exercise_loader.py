"""Exercise catalog loader from the bundled seed CSV."""

import logging
import re
from pathlib import Path

import aiosqlite

from ..config import get_settings
from ..db.engine import apply_semantic_corrections, get_connection, now_ms
from ..db.repositories import AppStateRepository, ExerciseRepository

logger = logging.getLogger(__name__)

_SURROUNDING_QUOTES = re.compile(r'^"|"$')


def get_seed_path() -> Path:
    """Get the path to the exercise seed file."""
    override = get_settings().seed_file
    if override is not None:
        return Path(override).expanduser()
    return Path(__file__).parent / "exercises_seed.csv"


def parse_seed_text(text: str) -> list[str]:
    """Parse the seed file into exercise names.

    The first non-blank line is a header and is skipped. Names may be
    wrapped in double quotes.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    names = []
    for line in lines[1:]:
        name = _SURROUNDING_QUOTES.sub("", line).strip()
        if name:
            names.append(name)
    return names


async def seed_exercises(
    db_path: Path | None = None, seed_path: Path | None = None
) -> int:
    """Load the catalog once, guarded by the ``seed_exercises_v1`` flag.

    Names already present are left alone. The flag is only set after the
    whole file has been loaded, so a failed run is retried in full.

    Args:
        db_path: Optional database path. Uses default if not provided.
        seed_path: Optional seed file. Uses the bundled CSV if not provided.

    Returns:
        Number of exercises inserted (0 when the seed was already applied)
    """
    state = AppStateRepository(db_path)
    if await state.is_seeded():
        logger.info("Exercise seed already applied")
        return 0

    if seed_path is None:
        seed_path = get_seed_path()

    repo = ExerciseRepository(db_path)
    db = await get_connection(db_path)
    try:
        names = parse_seed_text(seed_path.read_text(encoding="utf-8"))
        created_at = now_ms()
        inserted = 0
        for name in names:
            if await repo.add_if_missing(name, created_at):
                inserted += 1
        await db.commit()
    except (OSError, aiosqlite.Error) as e:
        await db.rollback()
        logger.error("Exercise seed from %s failed: %s", seed_path, e)
        raise

    await apply_semantic_corrections(db)
    await state.mark_seeded()
    logger.info("Seeded exercises from %s (%d rows, %d new)", seed_path, len(names), inserted)
    return inserted
