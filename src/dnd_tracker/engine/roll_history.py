"""Recent roll outcomes for display, newest first."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from dnd_tracker.core.constants import MAX_ROLL_HISTORY
from dnd_tracker.core.logging import get_logger
from dnd_tracker.engine.dice import AttackRollResult, RollResult, SaveRollResult
from dnd_tracker.models.enums import RollKind


if TYPE_CHECKING:
    from dnd_tracker.core.config import Settings


logger = get_logger(__name__)

AnyRollResult = AttackRollResult | SaveRollResult | RollResult


@dataclass(frozen=True)
class HistoryEntry:
    """One recorded roll.

    Attributes:
        result: The roll outcome.
        label: What was rolled ("Longsword", "DEX save").
        kind: Attack, save or check; inferred from the result by default.
        timestamp: When the roll was recorded.
    """

    result: AnyRollResult
    label: str
    kind: RollKind | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if self.kind is None:
            object.__setattr__(self, "kind", _infer_kind(self.result))

    @property
    def summary(self) -> str:
        """Short outcome text: ``"18! → 12"`` for attacks, ``"15 ✓"`` for saves."""
        result = self.result
        if isinstance(result, AttackRollResult):
            text = str(result.to_hit_roll.total)
            if result.is_crit:
                text += "!"
            if result.damage_roll is not None:
                text += f" → {result.damage_roll.total}"
            return text
        if isinstance(result, SaveRollResult):
            return f"{result.roll.total} {'✓' if result.success else '✗'}"
        return str(result.total)


def _infer_kind(result: AnyRollResult) -> RollKind:
    if isinstance(result, AttackRollResult):
        return RollKind.ATTACK
    if isinstance(result, SaveRollResult):
        return RollKind.SAVE
    return RollKind.CHECK


class RollHistory:
    """Bounded list of recent rolls; the oldest entry drops off when full."""

    def __init__(self, max_entries: int = MAX_ROLL_HISTORY) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._entries: deque[HistoryEntry] = deque(maxlen=max_entries)

    @classmethod
    def from_settings(cls, settings: Settings) -> RollHistory:
        return cls(settings.game.roll_history_limit)

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or MAX_ROLL_HISTORY

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[HistoryEntry]:
        """Recorded rolls, newest first."""
        return list(self._entries)

    def add(
        self,
        result: AnyRollResult,
        label: str,
        kind: RollKind | None = None,
    ) -> HistoryEntry:
        entry = HistoryEntry(result=result, label=label, kind=kind)
        self._entries.appendleft(entry)
        logger.debug("Roll recorded", label=label, kind=entry.kind, summary=entry.summary)
        return entry

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["HistoryEntry", "RollHistory"]
