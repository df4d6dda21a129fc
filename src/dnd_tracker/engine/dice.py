"""Dice rolling mechanics for D&D 5E.

This module produces every random outcome the tracker uses: plain ``NdS``
rolls, d20 rolls with advantage or disadvantage, attack resolution with
configurable critical-hit damage, and saving throws with half damage.

Malformed dice expressions never raise. They degrade to a zero-dice,
bonus-only result, so callers must tolerate an empty ``dice`` list.

Example:
    >>> roller = DiceRoller(seed=42)
    >>> result = roller.roll("2d6", bonus=3)
    >>> 5 <= result.total <= 15
    True
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from dnd_tracker.core.config import get_settings
from dnd_tracker.core.constants import D20_SIDES, DEFAULT_HIT_DIE, NATURAL_CRIT, NATURAL_FUMBLE
from dnd_tracker.core.exceptions import DiceRollError
from dnd_tracker.core.logging import get_logger
from dnd_tracker.models.enums import AdvantageState, CritBehavior
from dnd_tracker.models.macros import format_modifier


if TYPE_CHECKING:
    from collections.abc import Collection

    from dnd_tracker.core.config import Settings
    from dnd_tracker.models.macros import DamageRoll


logger = get_logger(__name__)

DICE_PATTERN = re.compile(r"([0-9]+)d([0-9]+)", re.IGNORECASE)


# =============================================================================
# Roll Results
# =============================================================================


@dataclass(frozen=True)
class DiceSpec:
    """A parsed ``NdS`` expression."""

    count: int
    sides: int

    @property
    def maximum(self) -> int:
        """Highest possible total of the dice."""
        return self.count * self.sides


@dataclass(frozen=True)
class DieResult:
    """One die as rolled.

    Attributes:
        sides: Size of the die.
        result: Face that counts toward the total.
        was_rerolled: Whether the first face was rerolled.
        original_roll: The replaced face when the die was rerolled.
    """

    sides: int
    result: int
    was_rerolled: bool = False
    original_roll: int | None = None


@dataclass(frozen=True)
class RollResult:
    """Outcome of rolling an expression plus a flat bonus."""

    dice: list[DieResult]
    bonus: int
    total: int
    expression: str


@dataclass(frozen=True)
class D20Roll:
    """A d20 roll after advantage or disadvantage is applied.

    Attributes:
        result: The face that counts.
        rolls: Every face rolled, kept for display.
    """

    result: int
    rolls: list[int]


@dataclass(frozen=True)
class AttackRollResult:
    """Outcome of an attack: the to-hit roll and the damage rolled with it.

    Attributes:
        to_hit_roll: d20 plus the attack bonus.
        natural: The d20 face after advantage, independent of the bonus.
        is_crit: Natural 20.
        is_fumble: Natural 1.
        damage_roll: Damage, rolled whether or not the attack hits.
        damage_type: Damage type from the damage recipe.
    """

    to_hit_roll: RollResult
    natural: int
    is_crit: bool
    is_fumble: bool
    damage_roll: RollResult | None = None
    damage_type: str | None = None


@dataclass(frozen=True)
class SaveRollResult:
    """Outcome of a saving throw and the damage it lets through."""

    roll: RollResult
    natural: int
    target_dc: int
    success: bool
    damage: RollResult | None = None
    damage_type: str | None = None


# =============================================================================
# Parsing
# =============================================================================


def parse_dice_expression(expression: str) -> DiceSpec | None:
    """Parse a single ``NdS`` term.

    Only ``<positive integer>d<positive integer>`` is accepted, with a
    case-insensitive ``d`` and surrounding whitespace ignored. Modifiers,
    multiple terms and zero-sized terms are rejected.

    Args:
        expression: Text such as ``"2d6"`` or ``" 1D20 "``.

    Returns:
        The parsed DiceSpec, or None if the text is not a single term.
    """
    match = DICE_PATTERN.fullmatch(expression.strip())
    if match is None:
        return None
    count, sides = int(match.group(1)), int(match.group(2))
    if count < 1 or sides < 1:
        return None
    return DiceSpec(count=count, sides=sides)


# =============================================================================
# Dice Roller
# =============================================================================


class DiceRoller:
    """Dice rolling with D&D 5E mechanics.

    Each roller owns its random source, so a seeded roller gives
    reproducible sequences without touching the global ``random`` state.

    Example:
        >>> roller = DiceRoller(seed=7)
        >>> attack = roller.roll_attack(5, advantage=AdvantageState.ADVANTAGE)
        >>> attack.to_hit_roll.total == attack.natural + 5
        True
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        crit_behavior: CritBehavior | str = CritBehavior.DOUBLE_DICE,
    ) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls.
            rng: Random source to draw from; overrides ``seed``.
            crit_behavior: Crit rule for attacks that do not name one.
        """
        self._rng = rng if rng is not None else random.Random(seed)
        self.crit_behavior = CritBehavior(crit_behavior)
        logger.debug("DiceRoller initialized", seed=seed, custom_rng=rng is not None)

    @classmethod
    def from_settings(cls, settings: Settings) -> DiceRoller:
        """Create a roller seeded and crit-ruled from the game settings."""
        return cls(seed=settings.game.dice_seed, crit_behavior=settings.game.critical_hit_rule)

    # -------------------------------------------------------------------------
    # Plain dice
    # -------------------------------------------------------------------------

    def roll_die(self, sides: int) -> int:
        """Roll one die.

        Args:
            sides: Number of faces.

        Returns:
            A face in [1, sides].

        Raises:
            DiceRollError: If the die has fewer than one face.
        """
        if sides < 1:
            raise DiceRollError("A die needs at least one face", sides=sides)
        return self._rng.randint(1, sides)

    def roll_dice(
        self,
        count: int,
        sides: int,
        reroll_on: Collection[int] | None = None,
    ) -> list[DieResult]:
        """Roll several dice of the same size.

        A face listed in ``reroll_on`` is rerolled exactly once; the second
        face stands even if it is also listed.

        Args:
            count: Number of dice.
            sides: Faces per die.
            reroll_on: Faces that trigger a single reroll.

        Returns:
            One DieResult per die, in roll order.
        """
        results: list[DieResult] = []
        for _ in range(count):
            face = self.roll_die(sides)
            if reroll_on and face in reroll_on:
                results.append(
                    DieResult(
                        sides=sides,
                        result=self.roll_die(sides),
                        was_rerolled=True,
                        original_roll=face,
                    )
                )
            else:
                results.append(DieResult(sides=sides, result=face))
        return results

    def roll_hit_dice(self, count: int, die_type: int | None = None) -> list[int]:
        """Roll hit dice spent on a short rest.

        Args:
            count: Dice spent.
            die_type: Faces per die, from the hit-dice resource; a d8 if unset.

        Returns:
            Raw faces, ready for ``SessionEngine.apply_rest``.
        """
        sides = die_type or DEFAULT_HIT_DIE
        faces = [self.roll_die(sides) for _ in range(count)]
        logger.debug("Hit dice rolled", sides=sides, faces=faces)
        return faces

    def roll(
        self,
        expression: str,
        bonus: int = 0,
        reroll_on: Collection[int] | None = None,
    ) -> RollResult:
        """Roll a dice expression and add a flat bonus.

        Args:
            expression: A single ``NdS`` term.
            bonus: Flat amount added to the dice total.
            reroll_on: Faces that trigger a single reroll.

        Returns:
            The RollResult. An unparseable expression yields no dice and a
            total equal to the bonus.
        """
        spec = parse_dice_expression(expression)
        if spec is None:
            logger.warning("Unparseable dice expression", expression=expression)
            return RollResult(dice=[], bonus=bonus, total=bonus, expression=expression)

        dice = self.roll_dice(spec.count, spec.sides, reroll_on)
        total = sum(d.result for d in dice) + bonus
        logger.debug("Dice rolled", expression=expression, bonus=bonus, total=total)
        return RollResult(dice=dice, bonus=bonus, total=total, expression=expression)

    # -------------------------------------------------------------------------
    # d20 rolls
    # -------------------------------------------------------------------------

    def roll_d20(self, advantage: AdvantageState | str = AdvantageState.NORMAL) -> D20Roll:
        """Roll a d20, twice with advantage or disadvantage.

        Args:
            advantage: Normal, advantage (keep the higher) or disadvantage
                (keep the lower).

        Returns:
            The kept face and every face rolled.
        """
        state = AdvantageState(advantage)
        if state == AdvantageState.NORMAL:
            face = self.roll_die(D20_SIDES)
            return D20Roll(result=face, rolls=[face])

        first, second = self.roll_die(D20_SIDES), self.roll_die(D20_SIDES)
        kept = max(first, second) if state == AdvantageState.ADVANTAGE else min(first, second)
        return D20Roll(result=kept, rolls=[first, second])

    def _d20_roll_result(self, natural: int, bonus: int) -> RollResult:
        return RollResult(
            dice=[DieResult(sides=D20_SIDES, result=natural)],
            bonus=bonus,
            total=natural + bonus,
            expression=f"1d{D20_SIDES}",
        )

    def roll_check(
        self,
        bonus: int,
        advantage: AdvantageState | str = AdvantageState.NORMAL,
    ) -> RollResult:
        """Roll an ability or skill check.

        Args:
            bonus: Total check modifier.
            advantage: Advantage state for the d20.

        Returns:
            RollResult with the kept d20 face as its only die.
        """
        d20 = self.roll_d20(advantage)
        return self._d20_roll_result(d20.result, bonus)

    def roll_attack(
        self,
        to_hit_bonus: int,
        damage: DamageRoll | None = None,
        crit_behavior: CritBehavior | str | None = None,
        advantage: AdvantageState | str = AdvantageState.NORMAL,
    ) -> AttackRollResult:
        """Roll an attack and its damage.

        Damage is rolled whether the attack hits or misses. On a natural 20
        the damage follows ``crit_behavior``:

        - ``double_dice``: twice the dice are rolled fresh; the bonus is unchanged.
        - ``max_plus_roll``: the dice are rolled once and their maximum is
          added to the bonus.

        Args:
            to_hit_bonus: Attack bonus added to the d20.
            damage: Damage recipe; None or unparseable dice roll no damage.
            crit_behavior: Critical damage rule; defaults to the roller's.
            advantage: Advantage state for the d20.

        Returns:
            AttackRollResult with crit/fumble flags and damage.
        """
        d20 = self.roll_d20(advantage)
        natural = d20.result
        is_crit = natural == NATURAL_CRIT
        is_fumble = natural == NATURAL_FUMBLE
        to_hit_roll = self._d20_roll_result(natural, to_hit_bonus)

        rule = CritBehavior(crit_behavior) if crit_behavior is not None else self.crit_behavior
        damage_roll = self._roll_attack_damage(damage, is_crit, rule)

        logger.info(
            "Attack rolled",
            natural=natural,
            to_hit=to_hit_roll.total,
            is_crit=is_crit,
            is_fumble=is_fumble,
            damage=damage_roll.total if damage_roll else None,
        )

        return AttackRollResult(
            to_hit_roll=to_hit_roll,
            natural=natural,
            is_crit=is_crit,
            is_fumble=is_fumble,
            damage_roll=damage_roll,
            damage_type=damage.damage_type if damage_roll and damage else None,
        )

    def _roll_attack_damage(
        self,
        damage: DamageRoll | None,
        is_crit: bool,
        crit_behavior: CritBehavior,
    ) -> RollResult | None:
        if damage is None:
            return None
        spec = parse_dice_expression(damage.dice)
        if spec is None:
            logger.warning("Unparseable damage dice", expression=damage.dice)
            return None

        if is_crit and crit_behavior == CritBehavior.MAX_PLUS_ROLL:
            dice = self.roll_dice(spec.count, spec.sides, damage.reroll_on)
            bonus = damage.bonus + spec.maximum
            return RollResult(
                dice=dice,
                bonus=bonus,
                total=sum(d.result for d in dice) + bonus,
                expression=f"{damage.dice}+{spec.maximum}(max)",
            )

        count = spec.count * 2 if is_crit else spec.count
        dice = self.roll_dice(count, spec.sides, damage.reroll_on)
        return RollResult(
            dice=dice,
            bonus=damage.bonus,
            total=sum(d.result for d in dice) + damage.bonus,
            expression=f"{count}d{spec.sides}" if is_crit else damage.dice,
        )

    def roll_save(
        self,
        save_dc: int,
        save_bonus: int,
        damage: DamageRoll | None = None,
        half_on_save: bool = True,
        advantage: AdvantageState | str = AdvantageState.NORMAL,
    ) -> SaveRollResult:
        """Roll a saving throw against a DC.

        The save succeeds when ``natural + save_bonus >= save_dc``; ties
        favor the saver. With a damage recipe, a failed save takes the full
        roll, a successful save takes half (rounded down) or nothing when
        ``half_on_save`` is False.

        Args:
            save_dc: Difficulty class to meet.
            save_bonus: Saving throw modifier.
            damage: Optional damage recipe.
            half_on_save: Whether a successful save still takes half damage.
            advantage: Advantage state for the d20.

        Returns:
            SaveRollResult with success flag and any damage taken.
        """
        d20 = self.roll_d20(advantage)
        natural = d20.result
        save_roll = self._d20_roll_result(natural, save_bonus)
        success = save_roll.total >= save_dc

        damage_roll: RollResult | None = None
        damage_type: str | None = None
        if damage is not None:
            full = self.roll(damage.dice, damage.bonus, damage.reroll_on)
            if not success:
                damage_roll = full
            elif half_on_save:
                damage_roll = replace(full, total=full.total // 2)
            damage_type = damage.damage_type

        logger.info(
            "Save rolled",
            natural=natural,
            total=save_roll.total,
            dc=save_dc,
            success=success,
        )

        return SaveRollResult(
            roll=save_roll,
            natural=natural,
            target_dc=save_dc,
            success=success,
            damage=damage_roll,
            damage_type=damage_type,
        )


# =============================================================================
# Formatting
# =============================================================================


def format_roll_result(result: RollResult) -> str:
    """Render a roll as ``"total (dice+bonus)"``, e.g. ``"15 (4+6+5)"``.

    Rerolled dice show the replaced face: ``"6(1→)"``.
    """
    faces = "+".join(
        f"{d.result}({d.original_roll}→)" if d.was_rerolled else str(d.result)
        for d in result.dice
    )
    if result.bonus == 0:
        return f"{result.total} ({faces})"
    return f"{result.total} ({faces}{format_modifier(result.bonus)})"


def format_attack_result(result: AttackRollResult) -> str:
    output = f"To Hit: {format_roll_result(result.to_hit_roll)}"
    if result.is_crit:
        output += " CRIT!"
    elif result.is_fumble:
        output += " Fumble!"
    if result.damage_roll is not None:
        output += f"\nDamage: {format_roll_result(result.damage_roll)} {result.damage_type or ''}".rstrip()
    return output


# =============================================================================
# Module-level convenience functions
# =============================================================================


_default_roller: DiceRoller | None = None


def get_default_roller() -> DiceRoller:
    """Get the shared roller used by the module-level functions, built from settings."""
    global _default_roller  # noqa: PLW0603
    if _default_roller is None:
        _default_roller = DiceRoller.from_settings(get_settings())
    return _default_roller


def roll_die(sides: int) -> int:
    return get_default_roller().roll_die(sides)


def roll_dice(count: int, sides: int, reroll_on: Collection[int] | None = None) -> list[DieResult]:
    return get_default_roller().roll_dice(count, sides, reroll_on)


def roll(expression: str, bonus: int = 0, reroll_on: Collection[int] | None = None) -> RollResult:
    """Convenience function to roll dice.

    Example:
        >>> result = roll("1d20", bonus=5)
        >>> 6 <= result.total <= 25
        True
    """
    return get_default_roller().roll(expression, bonus, reroll_on)


def roll_d20(advantage: AdvantageState | str = AdvantageState.NORMAL) -> D20Roll:
    return get_default_roller().roll_d20(advantage)


def roll_check(bonus: int, advantage: AdvantageState | str = AdvantageState.NORMAL) -> RollResult:
    return get_default_roller().roll_check(bonus, advantage)


def roll_attack(
    to_hit_bonus: int,
    damage: DamageRoll | None = None,
    crit_behavior: CritBehavior | str | None = None,
    advantage: AdvantageState | str = AdvantageState.NORMAL,
) -> AttackRollResult:
    return get_default_roller().roll_attack(to_hit_bonus, damage, crit_behavior, advantage)


def roll_save(
    save_dc: int,
    save_bonus: int,
    damage: DamageRoll | None = None,
    half_on_save: bool = True,
    advantage: AdvantageState | str = AdvantageState.NORMAL,
) -> SaveRollResult:
    return get_default_roller().roll_save(save_dc, save_bonus, damage, half_on_save, advantage)


__all__ = [
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
]
