"""Application settings.

Loaded from ``GYM_LOG_*`` environment variables or a ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for gym-log."""

    # --- Storage ---
    data_dir: Path = Path.home() / ".gym_log"
    db_filename: str = "gym_log.db"

    # Overrides the bundled exercises_seed.csv
    seed_file: Path | None = None

    # --- Export ---
    export_dir: Path | None = None  # defaults to <data_dir>/exports

    # --- Display defaults ---
    session_list_limit: int = 20
    exercise_list_limit: int = 500

    # INFO also shows migration and seeding progress on stderr
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="GYM_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def resolved_export_dir(self) -> Path:
        return self.export_dir or self.data_dir / "exports"


@lru_cache
def get_settings() -> Settings:
    return Settings()
