"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        TileForgeError: Base exception for all runtime errors.
        ConfigurationError: Configuration-related errors.
        DataLoadError: Map, quest and dialogue loading errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
"""

from __future__ import annotations

from tileforge.core.config import (
    GameplaySettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from tileforge.core.exceptions import (
    ConfigurationError,
    DataLoadError,
    DialogueLoadError,
    GameEngineError,
    InvalidGameStateError,
    MapLoadError,
    PersistenceError,
    QuestLoadError,
    SaveSlotNotFoundError,
    TileForgeError,
)
from tileforge.core.logging import (
    bind_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Configuration
    "GameplaySettings",
    "Settings",
    "StorageSettings",
    "clear_settings_cache",
    "get_settings",
    # Exceptions
    "ConfigurationError",
    "DataLoadError",
    "DialogueLoadError",
    "GameEngineError",
    "InvalidGameStateError",
    "MapLoadError",
    "PersistenceError",
    "QuestLoadError",
    "SaveSlotNotFoundError",
    "TileForgeError",
    # Logging
    "bind_context",
    "configure_logging",
    "get_logger",
]
