"""Character definition: the mostly-static character sheet.

The definition is edited in setup screens and read by the session engine
for maximum HP, ability modifiers and resource limits. The engine never
mutates it for play-state purposes.
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import Field

from dnd_tracker.core.constants import DEFAULT_ABILITY_SCORE
from dnd_tracker.models.base import TrackerModel
from dnd_tracker.models.enums import Ability, ProficiencyLevel, ResourceCategory
from dnd_tracker.models.macros import AttackMacro, CheckMacro, SaveMacro
from dnd_tracker.models.resources import ResourceDefinition


SKILL_ABILITIES: dict[str, Ability] = {
    "acrobatics": Ability.DEX,
    "animalHandling": Ability.WIS,
    "arcana": Ability.INT,
    "athletics": Ability.STR,
    "deception": Ability.CHA,
    "history": Ability.INT,
    "insight": Ability.WIS,
    "intimidation": Ability.CHA,
    "investigation": Ability.INT,
    "medicine": Ability.WIS,
    "nature": Ability.INT,
    "perception": Ability.WIS,
    "performance": Ability.CHA,
    "persuasion": Ability.CHA,
    "religion": Ability.INT,
    "sleightOfHand": Ability.DEX,
    "stealth": Ability.DEX,
    "survival": Ability.WIS,
}
"""Governing ability for each skill, keyed the way the JSON format keys skills."""


def calculate_modifier(score: int) -> int:
    """Calculate ability modifier from score."""
    return (score - 10) // 2


def proficiency_bonus_for_level(total_level: int) -> int:
    """Proficiency bonus for a total character level (+2 at 1-4, +3 at 5-8, ...)."""
    return (max(1, total_level) - 1) // 4 + 2


class AbilityScores(TrackerModel):
    """The six ability scores, serialized under their abbreviations."""

    strength: int = Field(default=DEFAULT_ABILITY_SCORE, ge=1, le=30, alias="str")
    dexterity: int = Field(default=DEFAULT_ABILITY_SCORE, ge=1, le=30, alias="dex")
    constitution: int = Field(default=DEFAULT_ABILITY_SCORE, ge=1, le=30, alias="con")
    intelligence: int = Field(default=DEFAULT_ABILITY_SCORE, ge=1, le=30, alias="int")
    wisdom: int = Field(default=DEFAULT_ABILITY_SCORE, ge=1, le=30, alias="wis")
    charisma: int = Field(default=DEFAULT_ABILITY_SCORE, ge=1, le=30, alias="cha")

    def score(self, ability: Ability) -> int:
        return getattr(self, ability.full_name.lower())

    def modifier(self, ability: Ability) -> int:
        return calculate_modifier(self.score(ability))


class CharacterClass(TrackerModel):
    """A class and level pair."""

    name: str
    subclass: str | None = None
    level: int = Field(default=1, ge=1, le=20)


class Currency(TrackerModel):
    cp: int = 0
    sp: int = 0
    ep: int = 0
    gp: int = 0
    pp: int = 0


class CharacterSpell(TrackerModel):
    """A known or prepared spell."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    level: int = Field(default=0, ge=0, le=9)
    prepared: bool = False
    ritual: bool = False
    concentration: bool = False
    notes: str | None = None


class CharacterDefinition(TrackerModel):
    """The static character sheet.

    Attributes:
        id: Character identifier; sessions link to it via ``definition_id``.
        max_hp: Hit point maximum that clamps all healing.
        resource_definitions: Limits and recharge rules for every resource.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    player_name: str | None = None
    race: str = ""
    classes: list[CharacterClass] = Field(default_factory=list)
    background: str = ""

    ability_scores: AbilityScores = Field(default_factory=AbilityScores)
    saving_throw_proficiencies: dict[Ability, ProficiencyLevel] = Field(default_factory=dict)
    skill_proficiencies: dict[str, ProficiencyLevel] = Field(default_factory=dict)

    max_hp: int = Field(ge=0, alias="maxHP")
    armor_class: int = Field(default=10, ge=0)
    speed: int = Field(default=30, ge=0)
    initiative_bonus: int = 0

    spellcasting_ability: Ability | None = None
    spell_save_dc: int | None = Field(default=None, alias="spellSaveDC")
    spell_attack_bonus: int | None = None

    resource_definitions: list[ResourceDefinition] = Field(default_factory=list)

    attack_macros: list[AttackMacro] = Field(default_factory=list)
    save_macros: list[SaveMacro] = Field(default_factory=list)
    check_macros: list[CheckMacro] = Field(default_factory=list)

    spells: list[CharacterSpell] = Field(default_factory=list)

    equipment: list[str] = Field(default_factory=list)
    currency: Currency = Field(default_factory=Currency)
    attuned_items: list[str] = Field(default_factory=list)

    notes: str = ""
    version: int = 1
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def total_level(self) -> int:
        return sum(c.level for c in self.classes)

    @property
    def proficiency_bonus(self) -> int:
        return proficiency_bonus_for_level(self.total_level)

    def ability_modifier(self, ability: Ability) -> int:
        return self.ability_scores.modifier(ability)

    def save_bonus(self, ability: Ability) -> int:
        """Saving throw bonus for an ability, including proficiency."""
        level = self.saving_throw_proficiencies.get(ability, ProficiencyLevel.NONE)
        return self.ability_modifier(ability) + self.proficiency_bonus * level.multiplier

    def skill_bonus(self, skill: str) -> int:
        """Skill check bonus, including proficiency or expertise."""
        ability = SKILL_ABILITIES[skill]
        level = self.skill_proficiencies.get(skill, ProficiencyLevel.NONE)
        return self.ability_modifier(ability) + self.proficiency_bonus * level.multiplier

    def get_resource(self, resource_id: str) -> ResourceDefinition | None:
        """Find a resource definition by id."""
        for resource in self.resource_definitions:
            if resource.id == resource_id:
                return resource
        return None

    def spell_slot_resource(self, slot_level: int) -> ResourceDefinition | None:
        """The slot resource spent to cast at ``slot_level``.

        Regular spell slots win over a pact slot of the same level.
        """
        pact = None
        for resource in self.resource_definitions:
            if resource.slot_level != slot_level:
                continue
            if resource.category == ResourceCategory.SPELL_SLOT:
                return resource
            if resource.category == ResourceCategory.PACT_SLOT and pact is None:
                pact = resource
        return pact

    def get_spell(self, name: str) -> CharacterSpell | None:
        """Find a known spell by name, ignoring case."""
        wanted = name.casefold()
        return next((s for s in self.spells if s.name.casefold() == wanted), None)

    @property
    def hit_dice_resource(self) -> ResourceDefinition | None:
        """The resource tracking hit dice, if the sheet has one."""
        for resource in self.resource_definitions:
            if resource.category == ResourceCategory.HIT_DICE:
                return resource
        return None


__all__ = [
    "SKILL_ABILITIES",
    "calculate_modifier",
    "proficiency_bonus_for_level",
    "AbilityScores",
    "CharacterClass",
    "Currency",
    "CharacterSpell",
    "CharacterDefinition",
]
