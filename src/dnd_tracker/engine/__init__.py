"""Game engine module for the D&D 5E character tracker.

Submodules:
    dice: Dice rolling, attack and save resolution
    recovery: Resource recharge rules for rests
    action_log: Bounded undo/redo history of session snapshots
    session_engine: The stateful core that mutates a character session
    roll_history: Recent roll outcomes for display

Example:
    >>> from dnd_tracker.engine import SessionEngine, roll_attack
    >>> engine = SessionEngine(definition)
    >>> attack = roll_attack(7, macro.damage)
    >>> if attack.damage_roll:
    ...     engine.modify_hp(-attack.damage_roll.total)
"""

from __future__ import annotations

# =============================================================================
# Dice Rolling
# =============================================================================
from dnd_tracker.engine.dice import (
    AttackRollResult,
    D20Roll,
    DiceRoller,
    DiceSpec,
    DieResult,
    RollResult,
    SaveRollResult,
    format_attack_result,
    format_roll_result,
    get_default_roller,
    parse_dice_expression,
    roll,
    roll_attack,
    roll_check,
    roll_d20,
    roll_dice,
    roll_die,
    roll_save,
)

# =============================================================================
# Recovery
# =============================================================================
from dnd_tracker.engine.recovery import (
    CASTER_PRESETS,
    SpellSlotPreset,
    calculate_recharge_amount,
    create_spell_slot_resources,
    get_resources_for_rest,
    hit_die_healing,
)

# =============================================================================
# History
# =============================================================================
from dnd_tracker.engine.action_log import Action, ActionLog, HistoryStep
from dnd_tracker.engine.roll_history import HistoryEntry, RollHistory

# =============================================================================
# Session Engine
# =============================================================================
from dnd_tracker.engine.session_engine import (
    PendingConcentrationCheck,
    SessionEngine,
    SessionListener,
    concentration_dc,
)


__all__ = [
    # Dice
    "DiceSpec",
    "DieResult",
    "RollResult",
    "D20Roll",
    "AttackRollResult",
    "SaveRollResult",
    "DiceRoller",
    "parse_dice_expression",
    "format_roll_result",
    "format_attack_result",
    "get_default_roller",
    "roll_die",
    "roll_dice",
    "roll",
    "roll_d20",
    "roll_check",
    "roll_attack",
    "roll_save",
    # Recovery
    "calculate_recharge_amount",
    "get_resources_for_rest",
    "hit_die_healing",
    "SpellSlotPreset",
    "CASTER_PRESETS",
    "create_spell_slot_resources",
    # History
    "Action",
    "ActionLog",
    "HistoryStep",
    "HistoryEntry",
    "RollHistory",
    # Session
    "PendingConcentrationCheck",
    "SessionEngine",
    "SessionListener",
    "concentration_dc",
]
