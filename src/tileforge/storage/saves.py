"""SQLite save slots for play sessions.

Each named slot holds one full GameState snapshot serialized as JSON,
plus the map it was saved on and its timestamps.

Storage location: ~/.tileforge/saves.db by default.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import pydantic

from tileforge.core.config import get_settings
from tileforge.core.exceptions import PersistenceError, SaveSlotNotFoundError
from tileforge.core.logging import get_logger
from tileforge.models.game_state import GameState


logger = get_logger(__name__)


@dataclass
class SaveRecord:
    """Metadata of a stored save slot.

    Attributes:
        slot: Slot name.
        map_id: Map the game was saved on.
        created_at: When the slot was first written.
        updated_at: When the slot was last written.
    """

    slot: str
    map_id: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: sqlite3.Row | tuple[Any, ...]) -> SaveRecord:
        """Create from database row."""
        return cls(
            slot=row[0],
            map_id=row[1],
            created_at=datetime.fromisoformat(row[2]),
            updated_at=datetime.fromisoformat(row[3]),
        )


class SaveStore:
    """SQLite store of named GameState snapshots."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize the store, creating the database if needed.

        Args:
            db_path: Database file; the configured saves path by default.
        """
        if db_path is None:
            self.db_path = get_settings().storage.saves_path
        else:
            self.db_path = Path(db_path)

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.debug("Save store ready", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS saves (
                    slot TEXT PRIMARY KEY,
                    map_id TEXT,
                    state_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_saves_updated
                ON saves(updated_at DESC)
            """)
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    # =========================================================================
    # Slot Operations
    # =========================================================================

    def save(self, state: GameState, slot: str) -> SaveRecord:
        """Write a state into a slot, replacing what it held.

        Args:
            state: Session state to persist.
            slot: Slot name.

        Returns:
            The stored slot metadata.
        """
        now = datetime.now()
        state_json = state.model_dump_json()

        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT created_at FROM saves WHERE slot = ?", (slot,))
            row = cursor.fetchone()
            created_at = datetime.fromisoformat(row[0]) if row else now

            cursor.execute(
                """
                INSERT INTO saves (slot, map_id, state_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(slot) DO UPDATE SET
                    map_id = excluded.map_id,
                    state_json = excluded.state_json,
                    updated_at = excluded.updated_at
                """,
                (slot, state.current_map_id, state_json, created_at.isoformat(), now.isoformat()),
            )

        logger.info("Game saved", slot=slot, map_id=state.current_map_id)
        return SaveRecord(
            slot=slot,
            map_id=state.current_map_id,
            created_at=created_at,
            updated_at=now,
        )

    def load(self, slot: str) -> GameState:
        """Read the state stored in a slot.

        Raises:
            SaveSlotNotFoundError: If the slot does not exist.
            PersistenceError: If the stored state cannot be parsed.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT state_json FROM saves WHERE slot = ?", (slot,))
            row = cursor.fetchone()

        if row is None:
            raise SaveSlotNotFoundError(f"No save in slot '{slot}'", slot=slot)

        try:
            state = GameState.model_validate_json(row[0])
        except pydantic.ValidationError as e:
            raise PersistenceError(
                "Save data is corrupt",
                slot=slot,
                details={"errors": e.error_count()},
            ) from e

        logger.info("Game loaded", slot=slot, map_id=state.current_map_id)
        return state

    def slot_exists(self, slot: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM saves WHERE slot = ?", (slot,))
            return cursor.fetchone() is not None

    def list_slots(self) -> list[SaveRecord]:
        """All save slots, most recently written first."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT slot, map_id, created_at, updated_at
                FROM saves ORDER BY updated_at DESC
            """)
            return [SaveRecord.from_row(tuple(row)) for row in cursor.fetchall()]

    def delete(self, slot: str) -> bool:
        """Delete a slot.

        Returns:
            True if deleted, False if not found.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM saves WHERE slot = ?", (slot,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Save deleted", slot=slot)
        return deleted


__all__ = [
    "SaveRecord",
    "SaveStore",
]
