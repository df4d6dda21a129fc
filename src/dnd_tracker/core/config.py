"""Application settings, read from the environment and an optional ``.env``.

Three groups, each a pydantic-settings class:

- ``StorageSettings`` (``DND_TRACKER_*``): where the SQLite file lives,
  how long autosave waits, how often a locked write is retried.
- ``GameSettings`` (``DND_TRACKER_GAME_*``): rules defaults such as the
  crit rule and the undo depth.
- ``Settings`` (``DND_TRACKER_*``): application-level switches, with the
  two groups nested under ``storage`` and ``game``. Nested values can
  also be given as ``DND_TRACKER_STORAGE__DATABASE_PATH`` and so on.

Example:
    >>> from dnd_tracker.core.config import get_settings
    >>> get_settings().game.undo_history_limit
    20
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dnd_tracker.core.constants import MAX_ROLL_HISTORY, MAX_UNDO_STACK
from dnd_tracker.core.exceptions import ConfigurationError


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
CritRule = Literal["double_dice", "max_plus_roll"]
HistoryDepth = Annotated[int, Field(ge=1, le=500)]


def _env(prefix: str, **extra: Any) -> SettingsConfigDict:
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        **extra,
    )


class StorageSettings(BaseSettings):
    """Persistence settings.

    Attributes:
        database_path: SQLite file; its directory is created on load.
        autosave_delay_seconds: Quiet period before a changed session is written.
        max_write_attempts: Tries for a write that finds the database locked.
    """

    model_config = _env("DND_TRACKER_")

    database_path: Path = Path("data/dnd_tracker.db")
    autosave_delay_seconds: float = Field(default=1.0, ge=0, le=60)
    max_write_attempts: int = Field(default=3, ge=1, le=10)

    @field_validator("database_path", mode="after")
    @classmethod
    def create_directory(cls, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        return path


class GameSettings(BaseSettings):
    """Rules defaults.

    Attributes:
        critical_hit_rule: Crit damage rule of rollers built from settings,
            used for attacks that do not name one.
        undo_history_limit: Actions kept by each loaded session engine's undo log.
        roll_history_limit: Roll outcomes kept by ``RollHistory.from_settings``.
        dice_seed: Seed for rollers built from settings, including the
            default roller; unset means unpredictable.
    """

    model_config = _env("DND_TRACKER_GAME_")

    critical_hit_rule: CritRule = "double_dice"
    undo_history_limit: HistoryDepth = MAX_UNDO_STACK
    roll_history_limit: Annotated[int, Field(ge=1, le=100)] = MAX_ROLL_HISTORY
    dice_seed: int | None = None


class Settings(BaseSettings):
    """Top-level settings.

    Attributes:
        debug: Development mode; logs go to the console even if
            ``json_logs`` is set.
        log_level: Threshold for structlog and the stdlib root logger.
        json_logs: Emit JSON log lines.
        storage: Persistence settings.
        game: Rules defaults.
    """

    model_config = _env("DND_TRACKER_", env_nested_delimiter="__")

    debug: bool = False
    log_level: LogLevel = "INFO"
    json_logs: bool = False

    storage: StorageSettings = Field(default_factory=StorageSettings)
    game: GameSettings = Field(default_factory=GameSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process.

    Raises:
        ConfigurationError: If any environment value fails validation.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Drop the cached settings so the next ``get_settings`` rereads the environment."""
    get_settings.cache_clear()


__all__ = [
    "StorageSettings",
    "GameSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
