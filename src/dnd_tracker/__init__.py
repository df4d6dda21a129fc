"""dnd_tracker - Offline D&D 5E character session tracker.

The core of a table-side character tracker: dice rolling, resource
recovery on rests, and a session engine whose every HP, resource,
condition and concentration change can be undone.

ARCHITECTURE:
- The CharacterDefinition (character sheet) is static during play
- The CharacterSession (play-state) is an immutable snapshot, replaced
  wholesale by the SessionEngine on every change
- Every change is recorded in a bounded undo/redo log
- Persistence is a debounced side effect, never awaited by the engine

Example:
    >>> from dnd_tracker import CharacterDefinition, SessionEngine, roll_attack
    >>>
    >>> hero = CharacterDefinition(name="Tolvis", max_hp=76)
    >>> engine = SessionEngine(hero)
    >>>
    >>> engine.modify_hp(-12)
    True
    >>> engine.session.current_hp
    64
    >>> engine.undo().action_name
    'HP -12'

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 schemas for definitions, sessions and macros.
    engine: Dice, recovery rules, action log and the session engine.
    storage: SQLite repository and debounced autosave.
"""

from __future__ import annotations

# Core
from dnd_tracker.core.config import Settings, get_settings
from dnd_tracker.core.exceptions import DndTrackerError
from dnd_tracker.core.logging import configure_logging, get_logger

# Models
from dnd_tracker.models import (
    AdvantageState,
    CharacterDefinition,
    CharacterExport,
    CharacterSession,
    ResourceDefinition,
    RestType,
    create_initial_session,
)

# Engine
from dnd_tracker.engine import (
    ActionLog,
    DiceRoller,
    SessionEngine,
    calculate_recharge_amount,
    get_resources_for_rest,
    roll,
    roll_attack,
    roll_d20,
    roll_save,
)

# Storage
from dnd_tracker.storage import Database, DebouncedSessionWriter


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "DndTrackerError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "AdvantageState",
    "CharacterDefinition",
    "CharacterExport",
    "CharacterSession",
    "ResourceDefinition",
    "RestType",
    "create_initial_session",
    # Engine
    "ActionLog",
    "DiceRoller",
    "SessionEngine",
    "calculate_recharge_amount",
    "get_resources_for_rest",
    "roll",
    "roll_attack",
    "roll_d20",
    "roll_save",
    # Storage
    "Database",
    "DebouncedSessionWriter",
]
