"""Character session: the mutable play-state of one character.

A session changes constantly during play (HP, resources, conditions) and
is what undo/redo and rests operate on. Each CharacterSession instance is
an immutable snapshot; the session engine replaces it wholesale on every
mutation, which is what makes the snapshot-based action log safe.
"""

from __future__ import annotations

from datetime import datetime
from typing import Self
from uuid import uuid4

from pydantic import Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from dnd_tracker.core.constants import MAX_DEATH_SAVES
from dnd_tracker.core.exceptions import ValidationError
from dnd_tracker.models.base import TrackerModel
from dnd_tracker.models.character import CharacterDefinition
from dnd_tracker.models.conditions import ActiveCondition
from dnd_tracker.models.enums import PinnedItemType
from dnd_tracker.models.resources import ResourceDefinition


class DeathSaves(TrackerModel):
    successes: int = Field(default=0, ge=0, le=MAX_DEATH_SAVES)
    failures: int = Field(default=0, ge=0, le=MAX_DEATH_SAVES)

    @property
    def is_stable(self) -> bool:
        return self.successes >= MAX_DEATH_SAVES

    @property
    def is_dead(self) -> bool:
        return self.failures >= MAX_DEATH_SAVES


class ConcentrationInfo(TrackerModel):
    """The spell currently held with concentration."""

    spell_name: str
    save_dc: int | None = Field(default=None, alias="saveDC")


class PinnedItem(TrackerModel):
    """A dashboard shortcut to a resource, macro, spell or condition."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: PinnedItemType
    reference_id: str
    order: int = 0


class CharacterSession(TrackerModel):
    """Play-state for one character.

    Attributes:
        id: Session identifier.
        definition_id: Id of the CharacterDefinition this session belongs to.
        current_hp: Hit points, kept within [0, max_hp] by the engine.
        temp_hp: Temporary hit points, never negative.
        death_saves: Death saving throw progress.
        is_downed: Set whenever HP is set to 0; can also be toggled manually.
        resource_currents: Current value per resource id; a missing key means
            the resource is at its maximum.
        conditions: Active conditions in application order.
        concentrating_on: Spell held with concentration, if any.
        pinned_items: Dashboard pins.
        last_modified: When the session last changed.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    definition_id: str
    current_hp: int = Field(default=0, ge=0, alias="currentHP")
    temp_hp: int = Field(default=0, ge=0, alias="tempHP")
    death_saves: DeathSaves = Field(default_factory=DeathSaves)
    is_downed: bool = False
    resource_currents: dict[str, int] = Field(default_factory=dict)
    conditions: list[ActiveCondition] = Field(default_factory=list)
    concentrating_on: ConcentrationInfo | None = None
    pinned_items: list[PinnedItem] = Field(default_factory=list)
    last_modified: datetime = Field(default_factory=datetime.now)

    def resource_current(self, resource: ResourceDefinition) -> int:
        """Current value of a resource, defaulting to its maximum."""
        return self.resource_currents.get(resource.id, resource.maximum)


def create_initial_session(definition: CharacterDefinition) -> CharacterSession:
    """Create the starting session for a character.

    Every resource starts at its maximum and HP starts full.
    """
    return CharacterSession(
        definition_id=definition.id,
        current_hp=definition.max_hp,
        resource_currents={r.id: r.maximum for r in definition.resource_definitions},
    )


class CharacterExport(TrackerModel):
    """A full character as exchanged with other installs: sheet plus play-state."""

    definition: CharacterDefinition
    session: CharacterSession

    @model_validator(mode="after")
    def session_matches_definition(self) -> Self:
        if self.session.definition_id != self.definition.id:
            raise ValueError(
                f"session belongs to {self.session.definition_id!r}, "
                f"not {self.definition.id!r}"
            )
        return self

    def to_json(self, *, indent: int | None = 2) -> str:
        """Serialize with the camelCase keys of the exchange format."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, text: str | bytes) -> CharacterExport:
        """Parse an exported character.

        Raises:
            ValidationError: If the text is not valid JSON or does not match
                the definition/session contract.
        """
        try:
            return cls.model_validate_json(text)
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid character export",
                details={"errors": _summarize_errors(exc)},
            ) from exc


def _summarize_errors(exc: PydanticValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]


__all__ = [
    "DeathSaves",
    "ConcentrationInfo",
    "PinnedItem",
    "CharacterSession",
    "CharacterExport",
    "create_initial_session",
]
