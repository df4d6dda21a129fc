"""Bounded undo/redo history of session snapshots.

Every recorded action stores the full state before and after it, so undo
and redo are plain lookups with no inverse operations to get wrong. The
states must be immutable for this to be safe.

The log is linear: recording a new action after an undo discards the
actions that could have been redone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from dnd_tracker.core.constants import DEFAULT_RECENT_ACTIONS, MAX_UNDO_STACK
from dnd_tracker.core.logging import get_logger


logger = get_logger(__name__)

StateT = TypeVar("StateT")


@dataclass(frozen=True)
class Action(Generic[StateT]):
    """One recorded state change.

    Attributes:
        name: Human-readable description ("Take 7 damage").
        previous_state: State before the change; restored by undo.
        new_state: State after the change; restored by redo.
        timestamp: When the action was recorded.
    """

    name: str
    previous_state: StateT
    new_state: StateT
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class HistoryStep(Generic[StateT]):
    """Result of a successful undo or redo."""

    action_name: str
    restored_state: StateT


class ActionLog(Generic[StateT]):
    """Linear, capped undo/redo log.

    ``pointer`` indexes the most recently applied action; -1 means every
    recorded action has been undone (or nothing was recorded). Actions
    after the pointer are available for redo.

    Example:
        >>> log = ActionLog()
        >>> log.push("Take 5 damage", before, after)
        >>> log.undo().restored_state is before
        True
    """

    def __init__(self, max_size: int = MAX_UNDO_STACK) -> None:
        """Initialize an empty log.

        Args:
            max_size: Maximum actions kept; the oldest are evicted first.

        Raises:
            ValueError: If max_size is less than 1.
        """
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self._max_size = max_size
        self._actions: list[Action[StateT]] = []
        self._pointer = -1

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def actions(self) -> tuple[Action[StateT], ...]:
        """Every retained action, oldest first."""
        return tuple(self._actions)

    @property
    def pointer(self) -> int:
        return self._pointer

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def can_undo(self) -> bool:
        return self._pointer >= 0

    @property
    def can_redo(self) -> bool:
        return self._pointer < len(self._actions) - 1

    def push(self, name: str, previous_state: StateT, new_state: StateT) -> Action[StateT]:
        """Record an action after the current pointer.

        Any undone actions are discarded first. When the log exceeds its
        size limit the oldest actions are evicted.

        Returns:
            The recorded Action.
        """
        discarded = len(self._actions) - (self._pointer + 1)
        del self._actions[self._pointer + 1 :]

        action = Action(name=name, previous_state=previous_state, new_state=new_state)
        self._actions.append(action)

        overflow = len(self._actions) - self._max_size
        if overflow > 0:
            del self._actions[:overflow]
        self._pointer = len(self._actions) - 1

        logger.debug(
            "Action recorded",
            action=name,
            discarded_redo=discarded,
            evicted=max(0, overflow),
            size=len(self._actions),
        )
        return action

    def undo(self) -> HistoryStep[StateT] | None:
        """Step back one action.

        Returns:
            The undone action's name and the state before it, or None if
            there is nothing to undo.
        """
        if not self.can_undo:
            return None
        action = self._actions[self._pointer]
        self._pointer -= 1
        logger.debug("Action undone", action=action.name, pointer=self._pointer)
        return HistoryStep(action_name=action.name, restored_state=action.previous_state)

    def redo(self) -> HistoryStep[StateT] | None:
        """Re-apply the next undone action.

        Returns:
            The redone action's name and the state after it, or None if
            there is nothing to redo.
        """
        if not self.can_redo:
            return None
        self._pointer += 1
        action = self._actions[self._pointer]
        logger.debug("Action redone", action=action.name, pointer=self._pointer)
        return HistoryStep(action_name=action.name, restored_state=action.new_state)

    def undo_description(self) -> str | None:
        """Name of the action undo would revert."""
        return self._actions[self._pointer].name if self.can_undo else None

    def redo_description(self) -> str | None:
        """Name of the action redo would re-apply."""
        return self._actions[self._pointer + 1].name if self.can_redo else None

    def recent_actions(self, count: int = DEFAULT_RECENT_ACTIONS) -> list[Action[StateT]]:
        """Up to ``count`` applied actions, newest first.

        Undone actions are not included.
        """
        if count <= 0:
            return []
        start = max(0, self._pointer - count + 1)
        return self._actions[start : self._pointer + 1][::-1]

    def clear(self) -> None:
        self._actions.clear()
        self._pointer = -1


__all__ = ["Action", "ActionLog", "HistoryStep"]
