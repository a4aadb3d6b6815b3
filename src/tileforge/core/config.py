"""Configuration management for the TileForge play-mode runtime.

Settings are loaded with pydantic-settings from environment variables and
an optional .env file. A missing .env file is simply skipped, so the
runtime always starts from the documented defaults.

Example:
    >>> from tileforge.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.gameplay.move_duration
    0.15

Environment Variables:
    TILEFORGE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    TILEFORGE_GAMEPLAY_MOVE_DURATION: Seconds for one tile of movement
    TILEFORGE_GAMEPLAY_PLAYER_ATTACK: Base attack of a new player
    TILEFORGE_STORAGE_PROJECT_PATH: Directory holding maps, dialogues and quests
    TILEFORGE_STORAGE_SAVES_PATH: Path to the SQLite save database
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tileforge.core.exceptions import ConfigurationError


class GameplaySettings(BaseSettings):
    """Tunables for the turn orchestrator and new-player defaults.

    Attributes:
        move_duration: Base seconds to cross one tile at movement cost 1.0.
        flash_duration: Seconds a damage flash stays visible.
        message_duration: Seconds a floating message stays visible.
        player_max_health: Max health of a freshly initialized player.
        player_attack: Base attack of a freshly initialized player.
        player_defense: Base defense of a freshly initialized player.
        player_max_ap: Base action points of a freshly initialized player.
        dialogue_chars_per_second: Typewriter reveal speed for dialogue text.
    """

    model_config = SettingsConfigDict(
        env_prefix="TILEFORGE_GAMEPLAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    move_duration: float = Field(
        default=0.15,
        description="Base seconds per tile of movement",
    )
    flash_duration: float = Field(
        default=0.3,
        ge=0.0,
        description="Seconds a damage flash stays visible",
    )
    message_duration: float = Field(
        default=1.0,
        description="Seconds a floating message stays visible",
    )
    player_max_health: int = Field(default=100, ge=1, description="New player max health")
    player_attack: int = Field(default=5, ge=0, description="New player base attack")
    player_defense: int = Field(default=2, ge=0, description="New player base defense")
    player_max_ap: int = Field(default=2, ge=1, description="New player action points")
    dialogue_chars_per_second: float = Field(
        default=40.0,
        gt=0.0,
        description="Dialogue typewriter speed",
    )

    @field_validator("move_duration", "message_duration", mode="after")
    @classmethod
    def ensure_positive_duration(cls, value: float, info: ValidationInfo) -> float:
        """Reject zero or negative durations.

        Raises:
            ConfigurationError: If the duration is not positive.
        """
        if value <= 0:
            raise ConfigurationError(
                f"Duration must be positive, got {value}",
                config_key=info.field_name,
            )
        return value


class StorageSettings(BaseSettings):
    """Locations of authored project data and save slots.

    Attributes:
        project_path: Directory holding maps, dialogues and quest files.
        quests_file: Quest file name relative to project_path.
        world_layout_file: World layout file name relative to project_path.
        saves_path: Path to the SQLite save database.
    """

    model_config = SettingsConfigDict(
        env_prefix="TILEFORGE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_path: Path = Field(
        default=Path("."),
        description="Directory holding maps, dialogues and quests",
    )
    quests_file: str = Field(default="quests.json", description="Quest file name")
    world_layout_file: str = Field(default="world.json", description="World layout file name")
    saves_path: Path = Field(
        default=Path.home() / ".tileforge" / "saves.db",
        description="Path to the SQLite save database",
    )

    @property
    def quests_path(self) -> Path:
        """Full path of the quest file."""
        return self.project_path / self.quests_file

    @property
    def world_layout_path(self) -> Path:
        """Full path of the world layout file."""
        return self.project_path / self.world_layout_file


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        gameplay: Turn orchestration tunables.
        storage: Project data and save locations.
    """

    model_config = SettingsConfigDict(
        env_prefix="TILEFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="TileForge Play", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    gameplay: GameplaySettings = Field(default_factory=GameplaySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration values are invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "GameplaySettings",
    "StorageSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
