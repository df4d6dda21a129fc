"""Tests for the session model and the character export format."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from dnd_tracker.core.exceptions import ValidationError
from dnd_tracker.models import (
    CharacterDefinition,
    CharacterExport,
    CharacterSession,
    ConcentrationInfo,
    DeathSaves,
    create_initial_session,
)


class TestDeathSaves:
    """Tests for DeathSaves."""

    def test_defaults(self) -> None:
        saves = DeathSaves()

        assert saves.successes == 0
        assert saves.failures == 0
        assert not saves.is_stable
        assert not saves.is_dead

    def test_thresholds(self) -> None:
        assert DeathSaves(successes=3).is_stable
        assert DeathSaves(failures=3).is_dead

    def test_bounds(self) -> None:
        with pytest.raises(PydanticValidationError):
            DeathSaves(failures=4)


class TestCharacterSession:
    """Tests for CharacterSession."""

    def test_initial_session(self, sample_definition: CharacterDefinition) -> None:
        """Test a new session starts at full HP with full resources."""
        session = create_initial_session(sample_definition)

        assert session.definition_id == "tolvis"
        assert session.current_hp == 76
        assert session.temp_hp == 0
        assert not session.is_downed
        assert session.conditions == []
        assert session.concentrating_on is None
        assert session.resource_currents == {
            "spell_slot_1": 4,
            "channel_divinity": 1,
            "hit_dice": 5,
            "lucky": 3,
            "wand_charges": 7,
        }

    def test_missing_resource_defaults_to_maximum(self, sample_definition: CharacterDefinition) -> None:
        session = CharacterSession(definition_id="tolvis", resource_currents={"lucky": 1})

        assert session.resource_current(sample_definition.get_resource("lucky")) == 1
        assert session.resource_current(sample_definition.get_resource("wand_charges")) == 7

    def test_negative_hp_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            CharacterSession(definition_id="tolvis", current_hp=-1)

    def test_camel_case_keys(self, sample_session: CharacterSession) -> None:
        session = sample_session.model_copy(
            update={"concentrating_on": ConcentrationInfo(spell_name="Bless", save_dc=15)}
        )

        data = session.model_dump(mode="json", by_alias=True)

        assert data["definitionId"] == "tolvis"
        assert data["currentHP"] == 76
        assert data["tempHP"] == 0
        assert data["deathSaves"] == {"successes": 0, "failures": 0}
        assert data["concentratingOn"] == {"spellName": "Bless", "saveDC": 15}


class TestCharacterExport:
    """Tests for the CharacterExport exchange format."""

    def test_json_round_trip(
        self,
        sample_definition: CharacterDefinition,
        sample_session: CharacterSession,
    ) -> None:
        export = CharacterExport(definition=sample_definition, session=sample_session)

        restored = CharacterExport.from_json(export.to_json())

        assert restored == export

    def test_to_json_is_camel_case(
        self,
        sample_definition: CharacterDefinition,
        sample_session: CharacterSession,
    ) -> None:
        text = CharacterExport(definition=sample_definition, session=sample_session).to_json()

        data = json.loads(text)

        assert data["definition"]["maxHP"] == 76
        assert data["session"]["resourceCurrents"]["lucky"] == 3

    def test_mismatched_session_rejected(self, sample_definition: CharacterDefinition) -> None:
        stranger = CharacterSession(definition_id="someone-else", current_hp=10)

        with pytest.raises(PydanticValidationError, match="someone-else"):
            CharacterExport(definition=sample_definition, session=stranger)

    def test_from_json_mismatch_raises_validation_error(
        self,
        sample_definition: CharacterDefinition,
    ) -> None:
        payload = json.dumps(
            {
                "definition": sample_definition.model_dump(mode="json", by_alias=True),
                "session": {"definitionId": "someone-else", "currentHP": 10},
            }
        )

        with pytest.raises(ValidationError) as exc_info:
            CharacterExport.from_json(payload)

        assert exc_info.value.details["errors"]

    def test_from_json_invalid_text(self) -> None:
        with pytest.raises(ValidationError):
            CharacterExport.from_json("{not json")

    def test_from_json_missing_session(self, sample_definition: CharacterDefinition) -> None:
        payload = json.dumps({"definition": sample_definition.model_dump(mode="json", by_alias=True)})

        with pytest.raises(ValidationError) as exc_info:
            CharacterExport.from_json(payload)

        assert any(err.startswith("session") for err in exc_info.value.details["errors"])
