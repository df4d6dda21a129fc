"""Persistence contract the session engine depends on."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from dnd_tracker.models.character import CharacterDefinition
from dnd_tracker.models.session import CharacterExport, CharacterSession


@runtime_checkable
class CharacterRepository(Protocol):
    """Stores character definitions and their sessions.

    Sessions are keyed by the id of the definition they belong to. Write
    failures raise StorageError.
    """

    def get_definition(self, character_id: str) -> CharacterDefinition | None: ...

    def list_definitions(self) -> list[CharacterDefinition]: ...

    def save_definition(self, definition: CharacterDefinition) -> None: ...

    def get_session(self, character_id: str) -> CharacterSession | None: ...

    def save_session(self, session: CharacterSession) -> None: ...

    def delete_character(self, character_id: str) -> bool: ...

    def export_character(self, character_id: str) -> CharacterExport | None: ...

    def import_character(self, export: CharacterExport) -> None: ...

    def clear(self) -> None: ...


__all__ = ["CharacterRepository"]
