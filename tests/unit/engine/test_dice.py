"""Tests for dice rolling mechanics."""

from __future__ import annotations

import pytest

from dnd_tracker.core.config import GameSettings, Settings
from dnd_tracker.core.exceptions import DiceRollError
from dnd_tracker.engine import dice as dice_module
from dnd_tracker.engine.dice import (
    DiceRoller,
    DiceSpec,
    format_attack_result,
    format_roll_result,
    get_default_roller,
    parse_dice_expression,
    roll,
    roll_die,
)
from dnd_tracker.models.enums import AdvantageState, CritBehavior
from dnd_tracker.models.macros import DamageRoll


class TestParseDiceExpression:
    """Tests for NdS parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1d20", DiceSpec(1, 20)),
            ("2d6", DiceSpec(2, 6)),
            (" 3D8 ", DiceSpec(3, 8)),
            ("10d10", DiceSpec(10, 10)),
        ],
    )
    def test_valid_expressions(self, text: str, expected: DiceSpec) -> None:
        """Single NdS terms parse, ignoring case and surrounding whitespace."""
        assert parse_dice_expression(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "d6", "2d", "1d20+5", "2d6+1d4", "0d6", "2d0", "abc", "2x6", "1d6 1d4", "-1d6"],
    )
    def test_invalid_expressions(self, text: str) -> None:
        """Anything other than one positive NdS term is rejected."""
        assert parse_dice_expression(text) is None

    def test_dice_spec_maximum(self) -> None:
        assert DiceSpec(2, 6).maximum == 12


class TestDiceRoller:
    """Tests for the DiceRoller class."""

    def test_roll_counts_and_ranges(self, dice_roller: DiceRoller) -> None:
        """Every roll has N dice in [1, S] and total equals their sum plus bonus."""
        for count, sides in [(1, 20), (2, 6), (4, 4), (8, 12)]:
            result = dice_roller.roll(f"{count}d{sides}", bonus=3)

            assert len(result.dice) == count
            assert all(1 <= d.result <= sides for d in result.dice)
            assert result.total == sum(d.result for d in result.dice) + 3

    def test_roll_with_scripted_faces(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        """Test a roll against known faces."""
        scripted_rng.push(4, 6, 5)

        result = scripted_roller.roll("3d6", bonus=2)

        assert [d.result for d in result.dice] == [4, 6, 5]
        assert result.total == 17
        assert result.expression == "3d6"

    @pytest.mark.parametrize("text", ["1d20+5", "fireball", ""])
    def test_unparseable_roll_is_bonus_only(self, dice_roller: DiceRoller, text: str) -> None:
        """Malformed expressions degrade to a zero-dice result."""
        result = dice_roller.roll(text, bonus=4)

        assert result.dice == []
        assert result.total == 4
        assert result.expression == text

    def test_reroll_happens_once(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        """A listed face is rerolled once and the second face stands."""
        scripted_rng.push(1, 6, 2, 1)

        result = scripted_roller.roll("2d6", reroll_on=[1, 2])

        first, second = result.dice
        assert (first.result, first.was_rerolled, first.original_roll) == (6, True, 1)
        assert (second.result, second.was_rerolled, second.original_roll) == (1, True, 2)
        assert result.total == 7
        assert scripted_rng.faces == []

    def test_face_not_in_reroll_list_is_kept(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(3)

        (die,) = scripted_roller.roll_dice(1, 6, reroll_on=[1, 2])

        assert die.result == 3
        assert die.was_rerolled is False
        assert die.original_roll is None

    def test_roll_die_rejects_faceless_die(self, dice_roller: DiceRoller) -> None:
        """Test that a die without faces raises DiceRollError."""
        with pytest.raises(DiceRollError) as exc_info:
            dice_roller.roll_die(0)

        assert exc_info.value.details["sides"] == 0

    def test_seeded_rollers_are_reproducible(self) -> None:
        """Test that the same seed produces the same results."""
        first = DiceRoller(seed=12345)
        second = DiceRoller(seed=12345)

        assert [first.roll_die(20) for _ in range(10)] == [second.roll_die(20) for _ in range(10)]

    def test_from_settings_uses_dice_seed(self) -> None:
        settings = Settings(game=GameSettings(dice_seed=99))

        first = DiceRoller.from_settings(settings)
        second = DiceRoller(seed=99)

        assert first.roll("4d6").dice == second.roll("4d6").dice

    def test_from_settings_uses_crit_rule(self) -> None:
        settings = Settings(game=GameSettings(critical_hit_rule="max_plus_roll"))

        assert DiceRoller.from_settings(settings).crit_behavior == CritBehavior.MAX_PLUS_ROLL
        assert DiceRoller().crit_behavior == CritBehavior.DOUBLE_DICE


class TestHitDice:
    """Tests for rolling spent hit dice."""

    def test_uses_resource_die(self, scripted_rng, scripted_roller: DiceRoller, sample_definition) -> None:
        scripted_rng.push(5, 3)

        faces = scripted_roller.roll_hit_dice(2, sample_definition.hit_dice_resource.die_type)

        assert faces == [5, 3]

    def test_defaults_to_d8(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(8)

        assert scripted_roller.roll_hit_dice(1) == [8]

    def test_none_spent(self, scripted_roller: DiceRoller) -> None:
        assert scripted_roller.roll_hit_dice(0) == []


class TestD20Rolls:
    """Tests for d20 rolls with advantage and disadvantage."""

    def test_normal_roll_is_single(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(11)

        d20 = scripted_roller.roll_d20(AdvantageState.NORMAL)

        assert d20.result == 11
        assert d20.rolls == [11]

    def test_advantage_keeps_higher(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(7, 15)

        d20 = scripted_roller.roll_d20(AdvantageState.ADVANTAGE)

        assert d20.result == 15
        assert d20.rolls == [7, 15]

    def test_disadvantage_keeps_lower(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(7, 15)

        d20 = scripted_roller.roll_d20("disadvantage")

        assert d20.result == 7
        assert d20.rolls == [7, 15]

    def test_advantage_property_holds_for_many_rolls(self, dice_roller: DiceRoller) -> None:
        for _ in range(50):
            adv = dice_roller.roll_d20(AdvantageState.ADVANTAGE)
            dis = dice_roller.roll_d20(AdvantageState.DISADVANTAGE)

            assert len(adv.rolls) == 2 and adv.result == max(adv.rolls)
            assert len(dis.rolls) == 2 and dis.result == min(dis.rolls)

    def test_roll_check(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(14)

        result = scripted_roller.roll_check(5)

        assert result.total == 19
        assert result.dice[0].result == 14
        assert result.expression == "1d20"

    def test_advantage_cycle(self) -> None:
        assert AdvantageState.NORMAL.cycle() == AdvantageState.ADVANTAGE
        assert AdvantageState.ADVANTAGE.cycle() == AdvantageState.DISADVANTAGE
        assert AdvantageState.DISADVANTAGE.cycle() == AdvantageState.NORMAL


class TestAttackRolls:
    """Tests for attack resolution."""

    @pytest.fixture
    def longsword(self) -> DamageRoll:
        return DamageRoll(dice="1d8", bonus=2, damage_type="slashing")

    def test_normal_hit(self, scripted_rng, scripted_roller: DiceRoller, longsword: DamageRoll) -> None:
        scripted_rng.push(12, 6)

        attack = scripted_roller.roll_attack(5, longsword)

        assert attack.natural == 12
        assert attack.to_hit_roll.total == 17
        assert not attack.is_crit and not attack.is_fumble
        assert attack.damage_roll is not None
        assert attack.damage_roll.total == 8
        assert attack.damage_roll.expression == "1d8"
        assert attack.damage_type == "slashing"

    def test_natural_20_doubles_dice(self, scripted_rng, scripted_roller: DiceRoller, longsword: DamageRoll) -> None:
        """Test that double_dice crits roll twice the dice and keep the bonus."""
        scripted_rng.push(20, 3, 5)

        attack = scripted_roller.roll_attack(5, longsword, CritBehavior.DOUBLE_DICE)

        assert attack.is_crit is True
        assert attack.is_fumble is False
        assert attack.damage_roll is not None
        assert len(attack.damage_roll.dice) == 2
        assert attack.damage_roll.bonus == 2
        assert attack.damage_roll.total == 10
        assert attack.damage_roll.expression == "2d8"

    def test_natural_20_max_plus_roll(self, scripted_rng, scripted_roller: DiceRoller, longsword: DamageRoll) -> None:
        """Test that max_plus_roll crits add the dice maximum to the bonus."""
        scripted_rng.push(20, 3)

        attack = scripted_roller.roll_attack(5, longsword, "max_plus_roll")

        assert attack.damage_roll is not None
        assert len(attack.damage_roll.dice) == 1
        assert attack.damage_roll.bonus == 10
        assert attack.damage_roll.total == 13
        assert attack.damage_roll.expression == "1d8+8(max)"

    def test_roller_crit_rule_used_when_unnamed(self, scripted_rng, longsword: DamageRoll) -> None:
        roller = DiceRoller(rng=scripted_rng, crit_behavior="max_plus_roll")
        scripted_rng.push(20, 3, 20, 3, 4)

        assert roller.roll_attack(5, longsword).damage_roll.total == 13
        assert roller.roll_attack(5, longsword, "double_dice").damage_roll.total == 9

    def test_natural_1_is_fumble_with_damage(self, scripted_rng, scripted_roller: DiceRoller, longsword: DamageRoll) -> None:
        """Test that damage is rolled even on a fumble."""
        scripted_rng.push(1, 4)

        attack = scripted_roller.roll_attack(5, longsword)

        assert attack.is_fumble is True
        assert attack.is_crit is False
        assert attack.damage_roll is not None
        assert attack.damage_roll.total == 6

    def test_crit_with_advantage(self, scripted_rng, scripted_roller: DiceRoller, longsword: DamageRoll) -> None:
        scripted_rng.push(20, 3, 4, 5)

        attack = scripted_roller.roll_attack(5, longsword, advantage=AdvantageState.ADVANTAGE)

        assert attack.natural == 20
        assert attack.is_crit is True
        assert attack.damage_roll is not None
        assert attack.damage_roll.total == 11

    def test_reroll_applies_to_attack_damage(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        greatsword = DamageRoll(dice="2d6", bonus=3, damage_type="slashing", reroll_on=[1, 2])
        scripted_rng.push(10, 1, 5, 6)

        attack = scripted_roller.roll_attack(5, greatsword)

        assert attack.damage_roll is not None
        assert [d.result for d in attack.damage_roll.dice] == [5, 6]
        assert attack.damage_roll.total == 14

    def test_unparseable_damage_rolls_nothing(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(15)

        attack = scripted_roller.roll_attack(5, DamageRoll(dice="1d8+2"))

        assert attack.damage_roll is None
        assert attack.damage_type is None

    def test_attack_without_damage(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(9)

        attack = scripted_roller.roll_attack(3)

        assert attack.to_hit_roll.total == 12
        assert attack.damage_roll is None


class TestSaveRolls:
    """Tests for saving throws."""

    @pytest.fixture
    def fireball(self) -> DamageRoll:
        return DamageRoll(dice="2d8", damage_type="fire")

    def test_tie_favors_the_saver(self, scripted_rng, scripted_roller: DiceRoller, fireball: DamageRoll) -> None:
        """Test that meeting the DC exactly succeeds and halves damage."""
        scripted_rng.push(12, 5, 6)

        save = scripted_roller.roll_save(15, 3, fireball)

        assert save.success is True
        assert save.natural == 12
        assert save.target_dc == 15
        assert save.damage is not None
        assert save.damage.total == 5
        assert save.damage_type == "fire"

    def test_failed_save_takes_full_damage(self, scripted_rng, scripted_roller: DiceRoller, fireball: DamageRoll) -> None:
        scripted_rng.push(11, 5, 6)

        save = scripted_roller.roll_save(15, 3, fireball)

        assert save.success is False
        assert save.damage is not None
        assert save.damage.total == 11

    def test_success_without_half_takes_nothing(self, scripted_rng, scripted_roller: DiceRoller, fireball: DamageRoll) -> None:
        scripted_rng.push(18, 5, 6)

        save = scripted_roller.roll_save(15, 3, fireball, half_on_save=False)

        assert save.success is True
        assert save.damage is None

    def test_save_without_damage(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(4)

        save = scripted_roller.roll_save(10, 2)

        assert save.success is False
        assert save.roll.total == 6
        assert save.damage is None

    def test_success_rule_for_many_rolls(self, dice_roller: DiceRoller, fireball: DamageRoll) -> None:
        for _ in range(50):
            save = dice_roller.roll_save(13, 2, fireball)

            assert save.success == (save.natural + 2 >= 13)
            if save.success:
                assert save.damage is not None
                assert save.damage.total == sum(d.result for d in save.damage.dice) // 2


class TestFormatting:
    """Tests for roll display strings."""

    def test_format_roll_with_bonus(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(4, 6, 5)

        assert format_roll_result(scripted_roller.roll("3d6", bonus=2)) == "17 (4+6+5+2)"

    def test_format_roll_marks_rerolls(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(1, 6, 4)

        result = scripted_roller.roll("2d6", reroll_on=[1])

        assert format_roll_result(result) == "10 (6(1→)+4)"

    def test_format_attack_result(self, scripted_rng, scripted_roller: DiceRoller) -> None:
        scripted_rng.push(20, 3, 5)

        attack = scripted_roller.roll_attack(5, DamageRoll(dice="1d8", bonus=2, damage_type="slashing"))

        assert format_attack_result(attack) == "To Hit: 25 (20+5) CRIT!\nDamage: 10 (3+5+2) slashing"


class TestConvenienceFunctions:
    """Tests for module-level convenience functions."""

    def test_roll_function(self) -> None:
        """Test the roll convenience function."""
        result = roll("1d20", bonus=5)

        assert 6 <= result.total <= 25
        assert len(result.dice) == 1

    def test_default_roller_is_shared_and_seeded(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(dice_module, "_default_roller", None)
        monkeypatch.setenv("DND_TRACKER_GAME_DICE_SEED", "7")

        shared = get_default_roller()
        expected = DiceRoller(seed=7)

        assert shared is get_default_roller()
        assert [roll_die(20) for _ in range(5)] == [expected.roll_die(20) for _ in range(5)]
