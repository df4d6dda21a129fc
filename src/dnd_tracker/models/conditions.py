"""Active conditions and the standard 5E condition reference.

An ActiveCondition is play-state: it sits in the session's condition list
and may carry a round countdown that ``end_turn`` ticks down. The
STANDARD_CONDITIONS table is static reference text for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from pydantic import Field

from dnd_tracker.models.base import TrackerModel


class ActiveCondition(TrackerModel):
    """A condition currently affecting the character.

    Attributes:
        id: Unique identifier of this application of the condition.
        name: Condition name ("Poisoned").
        source: What applied it ("Giant Spider bite").
        ends: Free-text end trigger ("End of next turn", "CON DC 14").
        rounds_remaining: Optional countdown; None means no automatic expiry.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    source: str | None = None
    ends: str | None = None
    rounds_remaining: int | None = None

    @property
    def is_expired(self) -> bool:
        return self.rounds_remaining is not None and self.rounds_remaining <= 0

    def tick(self) -> ActiveCondition:
        """Return this condition with one round taken off its countdown.

        Conditions without a countdown, or with one already at zero,
        are returned unchanged.
        """
        if self.rounds_remaining is None or self.rounds_remaining <= 0:
            return self
        return self.model_copy(update={"rounds_remaining": self.rounds_remaining - 1})


def create_condition(
    name: str,
    *,
    source: str | None = None,
    ends: str | None = None,
    rounds_remaining: int | None = None,
) -> ActiveCondition:
    """Create a new active condition with a fresh id."""
    return ActiveCondition(
        name=name,
        source=source,
        ends=ends,
        rounds_remaining=rounds_remaining,
    )


# =============================================================================
# Standard 5E Conditions
# =============================================================================


@dataclass(frozen=True)
class ConditionInfo:
    """Rules summary for a standard condition."""

    name: str
    description: str
    effects: tuple[str, ...]


STANDARD_CONDITIONS: tuple[ConditionInfo, ...] = (
    ConditionInfo(
        "Blinded",
        "Cannot see",
        (
            "Automatically fails ability checks requiring sight",
            "Attack rolls against you have advantage",
            "Your attack rolls have disadvantage",
        ),
    ),
    ConditionInfo(
        "Charmed",
        "Magically influenced",
        (
            "Can't attack the charmer or target them with harmful abilities",
            "Charmer has advantage on social checks against you",
        ),
    ),
    ConditionInfo(
        "Deafened",
        "Cannot hear",
        ("Automatically fails ability checks requiring hearing",),
    ),
    ConditionInfo(
        "Frightened",
        "Terrified of a source",
        (
            "Disadvantage on ability checks and attacks while source is visible",
            "Can't willingly move closer to the source",
        ),
    ),
    ConditionInfo(
        "Grappled",
        "Held in place",
        (
            "Speed becomes 0",
            "Ends if grappler is incapacitated or you are moved apart",
        ),
    ),
    ConditionInfo(
        "Incapacitated",
        "Cannot act",
        ("Can't take actions or reactions",),
    ),
    ConditionInfo(
        "Invisible",
        "Cannot be seen",
        (
            "Can't be seen without magic or special sense",
            "Attack rolls against you have disadvantage",
            "Your attack rolls have advantage",
        ),
    ),
    ConditionInfo(
        "Paralyzed",
        "Cannot move or speak",
        (
            "Incapacitated, cannot move or speak",
            "Automatically fails STR and DEX saves",
            "Attacks against you have advantage",
            "Hits within 5 feet are automatic crits",
        ),
    ),
    ConditionInfo(
        "Petrified",
        "Turned to stone",
        (
            "Transformed to inanimate substance",
            "Incapacitated, cannot move or speak",
            "Unaware of surroundings",
            "Attacks against you have advantage",
            "Automatically fails STR and DEX saves",
            "Resistance to all damage",
            "Immune to poison and disease",
        ),
    ),
    ConditionInfo(
        "Poisoned",
        "Suffering from poison",
        ("Disadvantage on attack rolls and ability checks",),
    ),
    ConditionInfo(
        "Prone",
        "Lying on the ground",
        (
            "Can only crawl (costs extra movement to stand)",
            "Disadvantage on attack rolls",
            "Attacks within 5 feet have advantage, others have disadvantage",
        ),
    ),
    ConditionInfo(
        "Restrained",
        "Held in place",
        (
            "Speed becomes 0",
            "Attack rolls against you have advantage",
            "Your attack rolls have disadvantage",
            "Disadvantage on DEX saves",
        ),
    ),
    ConditionInfo(
        "Stunned",
        "Overwhelmed",
        (
            "Incapacitated, cannot move",
            "Can only speak falteringly",
            "Automatically fails STR and DEX saves",
            "Attacks against you have advantage",
        ),
    ),
    ConditionInfo(
        "Unconscious",
        "Completely unaware",
        (
            "Incapacitated, cannot move or speak",
            "Unaware of surroundings, drops held items, falls prone",
            "Automatically fails STR and DEX saves",
            "Attacks against you have advantage",
            "Hits within 5 feet are automatic crits",
        ),
    ),
    ConditionInfo(
        "Exhaustion",
        "Levels of fatigue",
        (
            "1: Disadvantage on ability checks",
            "2: Speed halved",
            "3: Disadvantage on attacks and saves",
            "4: HP maximum halved",
            "5: Speed reduced to 0",
            "6: Death",
        ),
    ),
)


def find_condition_info(name: str) -> ConditionInfo | None:
    """Look up a standard condition by name (case-insensitive)."""
    wanted = name.strip().lower()
    for info in STANDARD_CONDITIONS:
        if info.name.lower() == wanted:
            return info
    return None


__all__ = [
    "ActiveCondition",
    "ConditionInfo",
    "STANDARD_CONDITIONS",
    "create_condition",
    "find_condition_info",
]
