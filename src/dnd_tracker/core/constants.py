"""Application-wide constants for the D&D 5E character tracker.

This module defines the D&D 5E rules constants and history limits used
by the dice, recovery and session engines.
"""

from __future__ import annotations

# =============================================================================
# History Limits
# =============================================================================

MAX_UNDO_STACK = 20
"""Maximum number of actions retained by the undo/redo log."""

MAX_ROLL_HISTORY = 10
"""Maximum number of roll outcomes kept in the roll history panel."""

DEFAULT_RECENT_ACTIONS = 5
"""Number of recent actions returned when no count is given."""

# =============================================================================
# D&D 5E Rules Constants
# =============================================================================

D20_SIDES = 20
"""Faces on the die used for attacks, saves and checks."""

NATURAL_CRIT = 20
"""Natural d20 face that scores a critical hit."""

NATURAL_FUMBLE = 1
"""Natural d20 face that is an automatic miss."""

MAX_DEATH_SAVES = 3
"""Successes or failures needed to stabilize or die."""

CONCENTRATION_MIN_DC = 10
"""Minimum DC for a concentration saving throw after damage."""

MIN_HIT_DIE_HEALING = 1
"""Minimum HP regained from a single spent hit die."""

DEFAULT_HIT_DIE = 8
"""Hit die size assumed when a hit-dice resource declares none."""

DEFAULT_ABILITY_SCORE = 10
"""Ability score used when none is recorded."""


__all__ = [
    "MAX_UNDO_STACK",
    "MAX_ROLL_HISTORY",
    "DEFAULT_RECENT_ACTIONS",
    "D20_SIDES",
    "NATURAL_CRIT",
    "NATURAL_FUMBLE",
    "MAX_DEATH_SAVES",
    "CONCENTRATION_MIN_DC",
    "MIN_HIT_DIE_HEALING",
    "DEFAULT_HIT_DIE",
    "DEFAULT_ABILITY_SCORE",
]
