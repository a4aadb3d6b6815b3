"""Custom exception hierarchy for the TileForge play-mode runtime.

All exceptions inherit from TileForgeError so callers at the session
boundary can handle any runtime failure in one place while keeping the
domain-specific context attached to each error.

Most gameplay problems (bad property values, unknown behaviors, missing
dialogue files) are recovered locally and never raise. The classes here
cover the explicit failure paths: strict data loading, save slots,
configuration and misuse of the engine API.

Example:
    >>> from tileforge.core.exceptions import MapLoadError
    >>> raise MapLoadError("Map JSON is not an object", map_id="overworld")
"""

from __future__ import annotations

from typing import Any


class TileForgeError(Exception):
    """Base exception for all TileForge runtime errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Data Loading Exceptions
# =============================================================================


class DataLoadError(TileForgeError):
    """Base exception for authored-data loading errors.

    Raised by the strict JSON entry points of the map, quest, dialogue
    and world-layout loaders. File-based wrappers catch it and fall back.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize data load error with source context.

        Args:
            message: Human-readable error description.
            source: Path or reference of the data that failed to load.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if source:
            combined_details["source"] = source
        super().__init__(message, details=combined_details)


class MapLoadError(DataLoadError):
    """Raised when exported map JSON cannot be parsed into a LoadedMap."""

    def __init__(
        self,
        message: str,
        *,
        map_id: str | None = None,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize map load error with map context.

        Args:
            message: Human-readable error description.
            map_id: Identifier of the map being loaded.
            source: Path of the map file.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if map_id:
            combined_details["map_id"] = map_id
        super().__init__(message, source=source, details=combined_details)


class QuestLoadError(DataLoadError):
    """Raised when a quest file is malformed JSON or has the wrong shape."""


class DialogueLoadError(DataLoadError):
    """Raised when a dialogue file cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        dialogue_ref: str | None = None,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dialogue load error with reference context.

        Args:
            message: Human-readable error description.
            dialogue_ref: The dialogue reference that was requested.
            source: Path of the dialogue file.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if dialogue_ref:
            combined_details["dialogue_ref"] = dialogue_ref
        super().__init__(message, source=source, details=combined_details)


# =============================================================================
# Game Engine Exceptions
# =============================================================================


class GameEngineError(TileForgeError):
    """Base exception for all game engine errors."""


class InvalidGameStateError(GameEngineError):
    """Raised when an engine operation is invoked in a state that cannot support it.

    Typical causes are orchestrating a turn before a map has been
    initialized or operating on a state that has no player.
    """

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid game state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current state identifier.
            expected_states: States that would have been valid.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


# =============================================================================
# Persistence Exceptions
# =============================================================================


class PersistenceError(TileForgeError):
    """Raised when a save slot cannot be written or read back."""

    def __init__(
        self,
        message: str,
        *,
        slot: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize persistence error with slot context.

        Args:
            message: Human-readable error description.
            slot: Name of the save slot involved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if slot:
            combined_details["slot"] = slot
        super().__init__(message, details=combined_details)


class SaveSlotNotFoundError(PersistenceError):
    """Raised when loading a save slot that does not exist."""


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(TileForgeError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "TileForgeError",
    # Data loading exceptions
    "DataLoadError",
    "MapLoadError",
    "QuestLoadError",
    "DialogueLoadError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    # Persistence exceptions
    "PersistenceError",
    "SaveSlotNotFoundError",
    # Configuration exceptions
    "ConfigurationError",
]
