"""Exception hierarchy for the character tracker.

Everything raised on purpose derives from DndTrackerError. Each subclass
names the context keywords it accepts; they are collected into
``details`` and rendered after the message.

Gameplay input that is merely malformed (an unparseable dice expression,
an unknown resource id) does not raise. It degrades to a neutral result
and a warning in the log. These exceptions cover programming errors and
collaborator failures.

Example:
    >>> from dnd_tracker.core.exceptions import StorageError
    >>> str(StorageError("Write failed", operation="save_session"))
    "Write failed [operation='save_session']"
"""

from __future__ import annotations

from typing import Any, ClassVar


class DndTrackerError(Exception):
    """Root of the tracker's exceptions.

    Attributes:
        message: Human-readable description.
        details: Context for logs and callers; ``None`` context values are dropped.
    """

    context_keys: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        **context: Any,
    ) -> None:
        unknown = set(context) - set(self.context_keys)
        if unknown:
            raise TypeError(
                f"{type(self).__name__} got unexpected context {sorted(unknown)}"
            )
        self.message = message
        self.details: dict[str, Any] = dict(details or {})
        self.details.update((k, v) for k, v in context.items() if v is not None)
        super().__init__(self._render())

    def _render(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} [{rendered}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Engine
# =============================================================================


class GameEngineError(DndTrackerError):
    """The engine was driven outside the range of playable input."""


class DiceRollError(GameEngineError):
    """A roll was requested with impossible parameters, such as a zero-sided die."""

    context_keys = ("expression", "sides")


class SessionStateError(GameEngineError):
    """A session was paired with a definition it does not belong to."""

    context_keys = ("character_id",)


# =============================================================================
# Storage
# =============================================================================


class StorageError(DndTrackerError):
    """A persistence operation failed.

    The session engine turns these into a ``False`` result from ``save``
    instead of letting them escape a gameplay action.
    """

    context_keys = ("operation", "character_id")


# =============================================================================
# Configuration & Data
# =============================================================================


class ConfigurationError(DndTrackerError):
    """Application settings could not be loaded."""

    context_keys = ("config_key",)


class ValidationError(DndTrackerError):
    """External data, such as an imported character, failed validation."""

    context_keys = ("field_name", "invalid_value")


__all__ = [
    "DndTrackerError",
    "GameEngineError",
    "DiceRollError",
    "SessionStateError",
    "StorageError",
    "ConfigurationError",
    "ValidationError",
]
