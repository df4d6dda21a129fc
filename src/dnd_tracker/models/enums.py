"""Enumeration types for the D&D 5E character tracker.

All enums are StrEnums so that they serialize to the same plain strings
the character JSON contract uses.
"""

from __future__ import annotations

from enum import StrEnum


class Ability(StrEnum):
    """The six D&D ability scores, keyed by their abbreviation."""

    STR = "str"
    DEX = "dex"
    CON = "con"
    INT = "int"
    WIS = "wis"
    CHA = "cha"

    @property
    def full_name(self) -> str:
        """Human-readable ability name."""
        return _ABILITY_NAMES[self]


_ABILITY_NAMES = {
    Ability.STR: "Strength",
    Ability.DEX: "Dexterity",
    Ability.CON: "Constitution",
    Ability.INT: "Intelligence",
    Ability.WIS: "Wisdom",
    Ability.CHA: "Charisma",
}


class ProficiencyLevel(StrEnum):
    """Proficiency in a save or skill."""

    NONE = "none"
    PROFICIENT = "proficient"
    EXPERTISE = "expertise"

    @property
    def multiplier(self) -> int:
        """Multiplier applied to the proficiency bonus."""
        return {"none": 0, "proficient": 1, "expertise": 2}[self.value]


class AdvantageState(StrEnum):
    """Roll-twice modifier applied to a d20 roll."""

    NORMAL = "normal"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"

    def cycle(self) -> AdvantageState:
        """Next state in the normal → advantage → disadvantage rotation."""
        order = list(AdvantageState)
        return order[(order.index(self) + 1) % len(order)]


class CritBehavior(StrEnum):
    """How damage dice are treated on a critical hit."""

    DOUBLE_DICE = "double_dice"
    """Roll twice as many damage dice (RAW D&D 5E)."""

    MAX_PLUS_ROLL = "max_plus_roll"
    """Roll the dice once and add their maximum on top."""


class RechargeOn(StrEnum):
    """When a resource restores itself."""

    SHORT_REST = "short_rest"
    LONG_REST = "long_rest"
    DAILY = "daily"
    MANUAL = "manual"


class RestType(StrEnum):
    """Types of rest in D&D 5E."""

    SHORT = "short"
    LONG = "long"


class ResourceCategory(StrEnum):
    """Kind of capped counter a resource tracks."""

    SPELL_SLOT = "spell_slot"
    PACT_SLOT = "pact_slot"
    HIT_DICE = "hit_dice"
    CLASS_FEATURE = "class_feature"
    ITEM_CHARGE = "item_charge"
    CUSTOM = "custom"


class PinnedItemType(StrEnum):
    """What a dashboard pin points at."""

    RESOURCE = "resource"
    ATTACK = "attack"
    SAVE = "save"
    CHECK = "check"
    SPELL = "spell"
    CONDITION = "condition"


class RollKind(StrEnum):
    """Category of a recorded roll."""

    ATTACK = "attack"
    SAVE = "save"
    CHECK = "check"


__all__ = [
    "Ability",
    "ProficiencyLevel",
    "AdvantageState",
    "CritBehavior",
    "RechargeOn",
    "RestType",
    "ResourceCategory",
    "PinnedItemType",
    "RollKind",
]
