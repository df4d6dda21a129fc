"""Pydantic V2 schemas for the D&D 5E character tracker.

Submodules:
    enums: Enumeration types (Ability, AdvantageState, RechargeOn, RestType, ...)
    resources: ResourceDefinition and recharge rules
    conditions: ActiveCondition and the standard condition reference
    macros: Attack, save and check macros with their damage rolls
    character: CharacterDefinition, the static character sheet
    session: CharacterSession play-state and the export contract

Example:
    >>> from dnd_tracker.models import CharacterDefinition, create_initial_session
    >>> hero = CharacterDefinition(name="Tolvis", max_hp=76)
    >>> session = create_initial_session(hero)
    >>> session.current_hp
    76
"""

from __future__ import annotations

from dnd_tracker.models.enums import (
    Ability,
    AdvantageState,
    CritBehavior,
    PinnedItemType,
    ProficiencyLevel,
    RechargeOn,
    ResourceCategory,
    RestType,
    RollKind,
)
from dnd_tracker.models.resources import RechargeAmount, ResourceDefinition
from dnd_tracker.models.conditions import (
    STANDARD_CONDITIONS,
    ActiveCondition,
    ConditionInfo,
    create_condition,
    find_condition_info,
)
from dnd_tracker.models.macros import (
    AttackMacro,
    CheckMacro,
    DamageRoll,
    SaveMacro,
    format_attack_macro,
    format_damage_roll,
    format_modifier,
)
from dnd_tracker.models.character import (
    SKILL_ABILITIES,
    AbilityScores,
    CharacterClass,
    CharacterDefinition,
    CharacterSpell,
    Currency,
    calculate_modifier,
    proficiency_bonus_for_level,
)
from dnd_tracker.models.session import (
    CharacterExport,
    CharacterSession,
    ConcentrationInfo,
    DeathSaves,
    PinnedItem,
    create_initial_session,
)


__all__ = [
    # Enumerations
    "Ability",
    "AdvantageState",
    "CritBehavior",
    "PinnedItemType",
    "ProficiencyLevel",
    "RechargeOn",
    "ResourceCategory",
    "RestType",
    "RollKind",
    # Resources
    "RechargeAmount",
    "ResourceDefinition",
    # Conditions
    "ActiveCondition",
    "ConditionInfo",
    "STANDARD_CONDITIONS",
    "create_condition",
    "find_condition_info",
    # Macros
    "DamageRoll",
    "AttackMacro",
    "SaveMacro",
    "CheckMacro",
    "format_modifier",
    "format_damage_roll",
    "format_attack_macro",
    # Character
    "SKILL_ABILITIES",
    "AbilityScores",
    "CharacterClass",
    "CharacterDefinition",
    "CharacterSpell",
    "Currency",
    "calculate_modifier",
    "proficiency_bonus_for_level",
    # Session
    "CharacterSession",
    "CharacterExport",
    "ConcentrationInfo",
    "DeathSaves",
    "PinnedItem",
    "create_initial_session",
]
