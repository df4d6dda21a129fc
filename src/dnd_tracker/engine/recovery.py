"""Resource recovery rules for short and long rests.

Pure functions: given a resource definition and its current value they
compute what a rest restores. The session engine decides which resources
the player chose to recover and applies the results.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from dnd_tracker.core.constants import MIN_HIT_DIE_HEALING
from dnd_tracker.models.enums import RechargeOn, ResourceCategory, RestType
from dnd_tracker.models.resources import ResourceDefinition


_SHORT_REST_RECHARGE = frozenset({RechargeOn.SHORT_REST})
_LONG_REST_RECHARGE = frozenset({RechargeOn.SHORT_REST, RechargeOn.LONG_REST, RechargeOn.DAILY})


def calculate_recharge_amount(definition: ResourceDefinition, current: int) -> int:
    """Compute a resource's value after it recharges.

    Args:
        definition: The resource and its recharge rule.
        current: Value before the rest.

    Returns:
        The new value, never above ``definition.maximum`` or below 0.
        ``"full"`` restores to maximum, ``"half"`` adds half the maximum
        rounded up (at least 1), and an integer adds that many.
    """
    maximum = definition.maximum
    amount = definition.recharge_amount

    if amount == "full":
        return maximum
    if amount == "half":
        restored = current + max(1, math.ceil(maximum / 2))
    else:
        restored = current + amount
    return max(0, min(maximum, restored))


def get_resources_for_rest(
    definitions: Iterable[ResourceDefinition],
    rest_type: RestType | str,
) -> list[ResourceDefinition]:
    """Resources that recharge on the given rest, in their original order.

    A short rest restores ``short_rest`` resources. A long rest also
    restores ``long_rest`` and ``daily`` resources. ``manual`` resources
    never recharge on a rest.
    """
    eligible = _LONG_REST_RECHARGE if RestType(rest_type) == RestType.LONG else _SHORT_REST_RECHARGE
    return [d for d in definitions if d.recharge_on in eligible]


def hit_die_healing(die_result: int, con_modifier: int) -> int:
    """HP regained from one spent hit die: the roll plus CON, at least 1."""
    return max(MIN_HIT_DIE_HEALING, die_result + con_modifier)


# =============================================================================
# Spell Slot Presets
# =============================================================================


_ORDINALS = ("", "1st", "2nd", "3rd", "4th", "5th", "6th", "7th", "8th", "9th")


def _ordinal(n: int) -> str:
    return _ORDINALS[n] if 0 < n < len(_ORDINALS) else f"{n}th"


@dataclass(frozen=True)
class SpellSlotPreset:
    """Spell slot layout for a caster progression.

    Attributes:
        name: Display name of the progression.
        slots: Slot count per spell level.
        pact_slot_level: Level of Warlock pact slots, if any.
        pact_slot_count: Number of pact slots.
    """

    name: str
    slots: dict[int, int] = field(default_factory=dict)
    pact_slot_level: int | None = None
    pact_slot_count: int = 0


CASTER_PRESETS: dict[str, SpellSlotPreset] = {
    "full": SpellSlotPreset(
        name="Full Caster",
        slots={1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 2, 8: 1, 9: 1},
    ),
    "half": SpellSlotPreset(name="Half Caster", slots={1: 4, 2: 3, 3: 3, 4: 3, 5: 2}),
    "third": SpellSlotPreset(name="Third Caster", slots={1: 4, 2: 3, 3: 3, 4: 1}),
    "warlock": SpellSlotPreset(name="Warlock", pact_slot_level=5, pact_slot_count=4),
    "artificer": SpellSlotPreset(name="Artificer", slots={1: 4, 2: 3, 3: 3, 4: 3, 5: 2}),
}


def create_spell_slot_resources(preset: SpellSlotPreset | str) -> list[ResourceDefinition]:
    """Build the slot resources for a caster preset.

    Regular slots get ids ``spell_slot_{level}`` and recharge fully on a
    long rest. Pact slots get the id ``pact_slot`` and recharge fully on a
    short rest.

    Args:
        preset: A SpellSlotPreset or the key of one in CASTER_PRESETS.

    Raises:
        KeyError: If a preset key is unknown.
    """
    if isinstance(preset, str):
        preset = CASTER_PRESETS[preset]

    resources = [
        ResourceDefinition(
            id=f"spell_slot_{level}",
            name=f"{_ordinal(level)} Level",
            category=ResourceCategory.SPELL_SLOT,
            maximum=count,
            slot_level=level,
            recharge_on=RechargeOn.LONG_REST,
            recharge_amount="full",
        )
        for level, count in sorted(preset.slots.items())
    ]

    if preset.pact_slot_level is not None:
        resources.append(
            ResourceDefinition(
                id="pact_slot",
                name=f"Pact Slot ({_ordinal(preset.pact_slot_level)})",
                category=ResourceCategory.PACT_SLOT,
                maximum=preset.pact_slot_count,
                slot_level=preset.pact_slot_level,
                recharge_on=RechargeOn.SHORT_REST,
                recharge_amount="full",
            )
        )

    return resources


__all__ = [
    "calculate_recharge_amount",
    "get_resources_for_rest",
    "hit_die_healing",
    "SpellSlotPreset",
    "CASTER_PRESETS",
    "create_spell_slot_resources",
]
