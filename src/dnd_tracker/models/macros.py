"""Typed roll macros: attacks, saves and checks saved on a character sheet.

A macro is the static recipe; rolling it is the dice engine's job.
"""

from __future__ import annotations

from uuid import uuid4

from pydantic import Field

from dnd_tracker.models.base import TrackerModel
from dnd_tracker.models.enums import Ability, CritBehavior


class DamageRoll(TrackerModel):
    """Damage recipe for an attack or save effect.

    Attributes:
        dice: Dice in ``NdS`` form ("2d6").
        bonus: Flat bonus added to the dice total.
        damage_type: Damage type ("slashing", "fire").
        reroll_on: Faces rerolled once (Great Weapon Fighting rerolls 1 and 2).
    """

    dice: str
    bonus: int = 0
    damage_type: str = Field(default="", alias="type")
    reroll_on: list[int] | None = None


class AttackMacro(TrackerModel):
    """A weapon or spell attack."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    to_hit: int = 0
    damage: DamageRoll
    versatile_damage: DamageRoll | None = None
    range: str | None = None
    tags: list[str] = Field(default_factory=list)
    crit_behavior: CritBehavior = CritBehavior.DOUBLE_DICE
    notes: str | None = None


class SaveMacro(TrackerModel):
    """An effect that forces a saving throw."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    save_dc: int = Field(alias="saveDC")
    save_ability: Ability
    damage: DamageRoll | None = None
    half_on_save: bool = True
    notes: str | None = None


class CheckMacro(TrackerModel):
    """A frequently rolled ability or skill check."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    ability: Ability
    skill: str | None = None
    bonus: int = 0
    notes: str | None = None


def format_modifier(modifier: int) -> str:
    """Render a modifier with an explicit sign ("+3", "-1")."""
    return f"+{modifier}" if modifier >= 0 else str(modifier)


def format_damage_roll(damage: DamageRoll) -> str:
    bonus = format_modifier(damage.bonus) if damage.bonus else ""
    return f"{damage.dice}{bonus} {damage.damage_type}".rstrip()


def format_attack_macro(macro: AttackMacro) -> str:
    return f"{format_modifier(macro.to_hit)} to hit, {format_damage_roll(macro.damage)}"


__all__ = [
    "DamageRoll",
    "AttackMacro",
    "SaveMacro",
    "CheckMacro",
    "format_modifier",
    "format_damage_roll",
    "format_attack_macro",
]
