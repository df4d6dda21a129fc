"""SQLite persistence layer for the character tracker.

Provides persistent storage for:
- Character definitions (the character sheet)
- Character sessions (play-state), one per definition

Both are stored as the camelCase JSON of the export format, so a row can
be handed to another install unchanged.

Storage location: ``DND_TRACKER_STORAGE__DATABASE_PATH`` (default
``data/dnd_tracker.db``).
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dnd_tracker.core.config import get_settings
from dnd_tracker.core.exceptions import StorageError
from dnd_tracker.core.logging import get_logger
from dnd_tracker.models.character import CharacterDefinition
from dnd_tracker.models.session import CharacterExport, CharacterSession


if TYPE_CHECKING:
    from dnd_tracker.core.config import Settings


logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# Database Class
# =============================================================================


class Database:
    """SQLite implementation of CharacterRepository.

    Every operation opens its own connection, so one Database may be
    shared by the engine and a background autosave thread. Writes that
    hit a locked database are retried.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path, *, max_write_attempts: int = 3) -> None:
        """Initialize database.

        Args:
            db_path: Path to the database file; ``":memory:"`` is not
                supported because each operation reconnects.
            max_write_attempts: Attempts per write before giving up.
        """
        self.db_path = Path(db_path)
        self.max_write_attempts = max_write_attempts

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.info("Database initialized", path=str(self.db_path))

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        return cls(
            settings.storage.database_path,
            max_write_attempts=settings.storage.max_write_attempts,
        )

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
        """Create missing tables.

        Raises:
            StorageError: If the file cannot be opened or written.
        """
        self._write("init_schema", self._create_tables)

    def _create_tables(self, cursor: sqlite3.Cursor) -> None:
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS definitions (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                data_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS sessions (
                definition_id TEXT PRIMARY KEY,
                id TEXT NOT NULL,
                data_json TEXT NOT NULL,
                last_modified TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_definitions_name
            ON definitions(name)
        """)

        cursor.execute(
            "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
            (self.SCHEMA_VERSION,),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _write(
        self,
        operation: str,
        work: Callable[[sqlite3.Cursor], T],
        *,
        character_id: str | None = None,
    ) -> T:
        """Run a write in one transaction, retrying while the database is locked.

        Raises:
            StorageError: If the write still fails after every attempt.
        """

        @retry(
            retry=retry_if_exception_type(sqlite3.OperationalError),
            stop=stop_after_attempt(self.max_write_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            reraise=True,
        )
        def _attempt() -> T:
            with self._get_connection() as conn:
                return work(conn.cursor())

        try:
            return _attempt()
        except sqlite3.Error as exc:
            logger.error("Storage write failed", operation=operation, error=str(exc))
            raise StorageError(
                f"Storage operation failed: {operation}",
                operation=operation,
                character_id=character_id,
            ) from exc

    def _read(
        self,
        operation: str,
        work: Callable[[sqlite3.Cursor], T],
        *,
        character_id: str | None = None,
    ) -> T:
        try:
            with self._get_connection() as conn:
                return work(conn.cursor())
        except sqlite3.Error as exc:
            raise StorageError(
                f"Storage operation failed: {operation}",
                operation=operation,
                character_id=character_id,
            ) from exc
        except PydanticValidationError as exc:
            raise StorageError(
                f"Stored data is corrupt: {operation}",
                operation=operation,
                character_id=character_id,
                details={"error_count": exc.error_count()},
            ) from exc

    @staticmethod
    def _put_definition(cursor: sqlite3.Cursor, definition: CharacterDefinition) -> None:
        cursor.execute(
            """
            INSERT OR REPLACE INTO definitions (id, name, data_json, updated_at)
            VALUES (?, ?, ?, ?)
            """,
            (
                definition.id,
                definition.name,
                definition.model_dump_json(by_alias=True),
                definition.updated_at.isoformat(),
            ),
        )

    @staticmethod
    def _put_session(cursor: sqlite3.Cursor, session: CharacterSession) -> None:
        cursor.execute(
            """
            INSERT OR REPLACE INTO sessions (definition_id, id, data_json, last_modified)
            VALUES (?, ?, ?, ?)
            """,
            (
                session.definition_id,
                session.id,
                session.model_dump_json(by_alias=True),
                session.last_modified.isoformat(),
            ),
        )

    # =========================================================================
    # Definition Operations
    # =========================================================================

    def get_definition(self, character_id: str) -> CharacterDefinition | None:
        """Get a character definition by id.

        Returns:
            The definition if found, None otherwise.
        """

        def work(cursor: sqlite3.Cursor) -> CharacterDefinition | None:
            cursor.execute("SELECT data_json FROM definitions WHERE id = ?", (character_id,))
            row = cursor.fetchone()
            return CharacterDefinition.model_validate_json(row["data_json"]) if row else None

        return self._read("get_definition", work, character_id=character_id)

    def list_definitions(self) -> list[CharacterDefinition]:
        """Get all character definitions, sorted by name."""

        def work(cursor: sqlite3.Cursor) -> list[CharacterDefinition]:
            cursor.execute("SELECT data_json FROM definitions ORDER BY name COLLATE NOCASE")
            return [
                CharacterDefinition.model_validate_json(row["data_json"])
                for row in cursor.fetchall()
            ]

        return self._read("list_definitions", work)

    def save_definition(self, definition: CharacterDefinition) -> None:
        self._write(
            "save_definition",
            lambda cursor: self._put_definition(cursor, definition),
            character_id=definition.id,
        )
        logger.info("Saved definition", character_id=definition.id, name=definition.name)

    # =========================================================================
    # Session Operations
    # =========================================================================

    def get_session(self, character_id: str) -> CharacterSession | None:
        """Get the session belonging to a character definition.

        Returns:
            The session if one is stored, None otherwise.
        """

        def work(cursor: sqlite3.Cursor) -> CharacterSession | None:
            cursor.execute(
                "SELECT data_json FROM sessions WHERE definition_id = ?", (character_id,)
            )
            row = cursor.fetchone()
            return CharacterSession.model_validate_json(row["data_json"]) if row else None

        return self._read("get_session", work, character_id=character_id)

    def save_session(self, session: CharacterSession) -> None:
        """Store a session, replacing the previous one for its character."""
        self._write(
            "save_session",
            lambda cursor: self._put_session(cursor, session),
            character_id=session.definition_id,
        )
        logger.debug("Saved session", character_id=session.definition_id)

    # =========================================================================
    # Bulk Operations
    # =========================================================================

    def delete_character(self, character_id: str) -> bool:
        """Delete a definition and its session.

        Returns:
            True if anything was deleted, False if not found.
        """

        def work(cursor: sqlite3.Cursor) -> bool:
            cursor.execute("DELETE FROM definitions WHERE id = ?", (character_id,))
            deleted = cursor.rowcount
            cursor.execute("DELETE FROM sessions WHERE definition_id = ?", (character_id,))
            return deleted + cursor.rowcount > 0

        deleted = self._write("delete_character", work, character_id=character_id)
        if deleted:
            logger.info("Deleted character", character_id=character_id)
        return deleted

    def export_character(self, character_id: str) -> CharacterExport | None:
        """Bundle a definition with its session.

        Returns:
            The export, or None if either half is missing.
        """
        definition = self.get_definition(character_id)
        if definition is None:
            return None
        session = self.get_session(character_id)
        if session is None:
            return None
        return CharacterExport(definition=definition, session=session)

    def import_character(self, export: CharacterExport) -> None:
        """Store a definition and its session in one transaction."""

        def work(cursor: sqlite3.Cursor) -> None:
            self._put_definition(cursor, export.definition)
            self._put_session(cursor, export.session)

        self._write("import_character", work, character_id=export.definition.id)
        logger.info(
            "Imported character",
            character_id=export.definition.id,
            name=export.definition.name,
        )

    def clear(self) -> None:
        """Delete every definition and session."""

        def work(cursor: sqlite3.Cursor) -> None:
            cursor.execute("DELETE FROM sessions")
            cursor.execute("DELETE FROM definitions")

        self._write("clear", work)
        logger.info("Database cleared")

    def get_character_count(self) -> int:
        return self._read(
            "get_character_count",
            lambda cursor: cursor.execute("SELECT COUNT(*) FROM definitions").fetchone()[0],
        )


# =============================================================================
# Singleton Instance
# =============================================================================


_database_instance: Database | None = None


def get_database() -> Database:
    """Get the global database instance, configured from settings.

    Returns:
        Database singleton instance.
    """
    global _database_instance  # noqa: PLW0603

    if _database_instance is None:
        _database_instance = Database.from_settings(get_settings())

    return _database_instance


__all__ = ["Database", "get_database"]
