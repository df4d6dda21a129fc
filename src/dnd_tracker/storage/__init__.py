"""Storage module for character persistence.

Provides:
- CharacterRepository, the contract the session engine saves through
- Database, a SQLite implementation storing definitions and sessions
- DebouncedSessionWriter, background autosave for a session engine
"""

from dnd_tracker.storage.autosave import DebouncedSessionWriter
from dnd_tracker.storage.database import Database, get_database
from dnd_tracker.storage.repository import CharacterRepository


__all__ = [
    "CharacterRepository",
    "Database",
    "DebouncedSessionWriter",
    "get_database",
]
