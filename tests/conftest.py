"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the character tracker test suite.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


class ScriptedRandom(random.Random):
    """A Random whose ``randint`` returns queued faces in order."""

    def __init__(self) -> None:
        super().__init__(0)
        self.faces: list[int] = []

    def push(self, *faces: int) -> ScriptedRandom:
        self.faces.extend(faces)
        return self

    def randint(self, a: int, b: int) -> int:
        if not self.faces:
            raise AssertionError("ran out of scripted dice faces")
        face = self.faces.pop(0)
        if not a <= face <= b:
            raise AssertionError(f"scripted face {face} outside [{a}, {b}]")
        return face


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dnd_tracker.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def isolated_database_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the default database at a temporary directory."""
    db_path = tmp_path / "settings" / "tracker.db"
    monkeypatch.setenv("DND_TRACKER_DATABASE_PATH", str(db_path))
    return db_path


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "DND_TRACKER_DEBUG": "true",
        "DND_TRACKER_LOG_LEVEL": "DEBUG",
        "DND_TRACKER_GAME_UNDO_HISTORY_LIMIT": "5",
        "DND_TRACKER_GAME_CRITICAL_HIT_RULE": "max_plus_roll",
        "DND_TRACKER_AUTOSAVE_DELAY_SECONDS": "0.25",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_definition_data() -> dict[str, Any]:
    """Provide a level 5 cleric in the camelCase export format.

    Returns:
        Dictionary of character definition data.
    """
    return {
        "id": "tolvis",
        "name": "Tolvis",
        "race": "Hill Dwarf",
        "classes": [{"name": "Cleric", "subclass": "Life Domain", "level": 5}],
        "abilityScores": {"str": 14, "dex": 10, "con": 14, "int": 10, "wis": 18, "cha": 12},
        "savingThrowProficiencies": {"wis": "proficient", "cha": "proficient"},
        "skillProficiencies": {"medicine": "proficient", "insight": "expertise"},
        "maxHP": 76,
        "armorClass": 18,
        "spellcastingAbility": "wis",
        "spellSaveDC": 15,
        "spellAttackBonus": 7,
        "resourceDefinitions": [
            {
                "id": "spell_slot_1",
                "name": "1st Level",
                "category": "spell_slot",
                "maximum": 4,
                "slotLevel": 1,
                "rechargeOn": "long_rest",
                "rechargeAmount": "full",
            },
            {
                "id": "channel_divinity",
                "name": "Channel Divinity",
                "category": "class_feature",
                "maximum": 1,
                "rechargeOn": "short_rest",
                "rechargeAmount": "full",
            },
            {
                "id": "hit_dice",
                "name": "Hit Dice",
                "category": "hit_dice",
                "maximum": 5,
                "dieType": 8,
                "rechargeOn": "long_rest",
                "rechargeAmount": "half",
            },
            {
                "id": "lucky",
                "name": "Lucky",
                "category": "class_feature",
                "maximum": 3,
                "rechargeOn": "daily",
                "rechargeAmount": "full",
            },
            {
                "id": "wand_charges",
                "name": "Wand of Cure Wounds",
                "category": "item_charge",
                "maximum": 7,
                "rechargeOn": "manual",
                "rechargeAmount": 2,
            },
        ],
        "attackMacros": [
            {
                "id": "warhammer",
                "name": "Warhammer",
                "toHit": 5,
                "damage": {"dice": "1d8", "bonus": 2, "type": "bludgeoning"},
                "versatileDamage": {"dice": "1d10", "bonus": 2, "type": "bludgeoning"},
                "tags": ["melee"],
            }
        ],
        "saveMacros": [
            {
                "id": "sacred_flame",
                "name": "Sacred Flame",
                "saveDC": 15,
                "saveAbility": "dex",
                "damage": {"dice": "2d8", "type": "radiant"},
                "halfOnSave": False,
            }
        ],
        "spells": [{"name": "Bless", "level": 1, "prepared": True, "concentration": True}],
    }


@pytest.fixture
def sample_definition(sample_definition_data: dict[str, Any]) -> Any:
    """Create a CharacterDefinition from the sample data.

    Returns:
        CharacterDefinition instance.
    """
    from dnd_tracker.models import CharacterDefinition

    return CharacterDefinition.model_validate(sample_definition_data)


@pytest.fixture
def sample_session(sample_definition: Any) -> Any:
    """Create the starting session for the sample character."""
    from dnd_tracker.models import create_initial_session

    return create_initial_session(sample_definition)


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def dice_roller() -> Any:
    """Create a DiceRoller with a fixed seed for reproducible tests.

    Returns:
        DiceRoller instance with fixed seed.
    """
    from dnd_tracker.engine.dice import DiceRoller

    return DiceRoller(seed=42)


@pytest.fixture
def scripted_rng() -> ScriptedRandom:
    """Random source whose dice faces are queued by the test."""
    return ScriptedRandom()


@pytest.fixture
def scripted_roller(scripted_rng: ScriptedRandom) -> Any:
    """DiceRoller drawing from ``scripted_rng``."""
    from dnd_tracker.engine.dice import DiceRoller

    return DiceRoller(rng=scripted_rng)


@pytest.fixture
def engine(sample_definition: Any) -> Any:
    """Create a SessionEngine for the sample character at full health.

    Returns:
        SessionEngine instance.
    """
    from dnd_tracker.engine.session_engine import SessionEngine

    return SessionEngine(sample_definition)


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def database(tmp_path: Path) -> Any:
    """Create an empty SQLite database in a temporary directory.

    Returns:
        Database instance.
    """
    from dnd_tracker.storage.database import Database

    return Database(tmp_path / "db" / "test.db")


@pytest.fixture
def stored_character(database: Any, sample_definition: Any) -> Any:
    """Store the sample definition (without a session) and return it."""
    database.save_definition(sample_definition)
    return sample_definition
