"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        DndTrackerError: Base exception for all application errors.
        GameEngineError, DiceRollError, SessionStateError: Engine errors.
        StorageError: Persistence failures.
        ConfigurationError, ValidationError: Configuration and data errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        character_context: Scope log context to one character.
"""

from __future__ import annotations

from dnd_tracker.core.config import (
    GameSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_tracker.core.exceptions import (
    ConfigurationError,
    DiceRollError,
    DndTrackerError,
    GameEngineError,
    SessionStateError,
    StorageError,
    ValidationError,
)
from dnd_tracker.core.logging import (
    bind_context,
    character_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Exceptions
    "DndTrackerError",
    "GameEngineError",
    "DiceRollError",
    "SessionStateError",
    "StorageError",
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "Settings",
    "StorageSettings",
    "GameSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "character_context",
]
