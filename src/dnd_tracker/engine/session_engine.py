"""Session engine: the single path through which a character session changes.

Every mutation follows the same steps:

1. Compute a new session from the current one and the character definition.
2. Record ``{previous, new}`` in the action log under a readable name.
3. Publish the new session to subscribers.
4. Raise derived signals, such as a pending concentration check.

A mutation whose result equals the current session is a no-op. Nothing
is recorded and subscribers are not notified.

Example:
    >>> engine = SessionEngine(definition)
    >>> engine.modify_hp(-7)
    True
    >>> engine.undo().action_name
    'HP -7'
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from dnd_tracker.core.constants import (
    CONCENTRATION_MIN_DC,
    DEFAULT_RECENT_ACTIONS,
    MAX_DEATH_SAVES,
    MAX_UNDO_STACK,
)
from dnd_tracker.core.exceptions import SessionStateError, StorageError
from dnd_tracker.core.logging import character_context, get_logger
from dnd_tracker.engine.action_log import Action, ActionLog, HistoryStep
from dnd_tracker.engine.recovery import (
    calculate_recharge_amount,
    get_resources_for_rest,
    hit_die_healing,
)
from dnd_tracker.models.conditions import ActiveCondition, create_condition
from dnd_tracker.models.enums import Ability, RestType
from dnd_tracker.models.session import (
    CharacterSession,
    ConcentrationInfo,
    DeathSaves,
    create_initial_session,
)


if TYPE_CHECKING:
    from dnd_tracker.core.config import Settings
    from dnd_tracker.models.character import CharacterDefinition
    from dnd_tracker.models.resources import ResourceDefinition
    from dnd_tracker.storage.repository import CharacterRepository


logger = get_logger(__name__)

SessionListener = Callable[[CharacterSession], None]


@dataclass(frozen=True)
class PendingConcentrationCheck:
    """A concentration save the player owes after taking damage.

    This is a signal for the caller, not part of the session, and is
    never recorded in the undo history.
    """

    spell_name: str
    dc: int


def concentration_dc(damage: int) -> int:
    """DC of the concentration save after taking ``damage``."""
    return max(CONCENTRATION_MIN_DC, damage // 2)


class SessionEngine:
    """Owns the current session of one character and its undo history.

    Several engines may coexist; each holds its own session reference,
    action log and subscribers.

    Attributes:
        definition: The character sheet; read only.
        session: The current session snapshot.
        pending_concentration_check: Check raised by the last damage taken
            while concentrating, if the caller has not resolved it.
    """

    def __init__(
        self,
        definition: CharacterDefinition,
        session: CharacterSession | None = None,
        *,
        history_limit: int = MAX_UNDO_STACK,
    ) -> None:
        """Initialize the engine.

        Args:
            definition: Character sheet the session belongs to.
            session: Starting session; a fresh one is created if omitted.
            history_limit: Maximum undoable actions.

        Raises:
            SessionStateError: If the session belongs to another character.
        """
        if session is None:
            session = create_initial_session(definition)
        elif session.definition_id != definition.id:
            raise SessionStateError(
                "Session does not belong to this character",
                character_id=definition.id,
                details={"session_definition_id": session.definition_id},
            )

        self._definition = definition
        self._session = session
        self._history: ActionLog[CharacterSession] = ActionLog(history_limit)
        self._pending_check: PendingConcentrationCheck | None = None
        self._listeners: list[SessionListener] = []
        self._logger = logger.bind(character_id=definition.id)

        self._logger.debug("SessionEngine initialized", history_limit=history_limit)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @classmethod
    def load(
        cls,
        repository: CharacterRepository,
        character_id: str,
        *,
        settings: Settings | None = None,
    ) -> SessionEngine | None:
        """Load a character and start a fresh undo history.

        A character with no stored session gets an initial one, which is
        saved immediately.

        Args:
            repository: Where definitions and sessions are stored.
            character_id: Definition id to load.
            settings: Optional settings supplying the undo history limit.

        Returns:
            The engine, or None if no definition has that id.
        """
        definition = repository.get_definition(character_id)
        if definition is None:
            logger.warning("Character not found", character_id=character_id)
            return None

        with character_context(character_id):
            session = repository.get_session(character_id)
            if session is None:
                session = create_initial_session(definition)
                try:
                    repository.save_session(session)
                except StorageError as exc:
                    logger.error("Failed to save initial session", error=str(exc))

            history_limit = settings.game.undo_history_limit if settings else MAX_UNDO_STACK
            logger.info("Character loaded", name=definition.name)
            return cls(definition, session, history_limit=history_limit)

    def save(self, repository: CharacterRepository) -> bool:
        """Write the current session.

        Returns:
            True if the write succeeded, False if storage failed.
        """
        try:
            repository.save_session(self._session)
        except StorageError as exc:
            self._logger.error("Failed to save session", error=str(exc))
            return False
        return True

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` with every newly published session.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def definition(self) -> CharacterDefinition:
        return self._definition

    @property
    def session(self) -> CharacterSession:
        return self._session

    @property
    def pending_concentration_check(self) -> PendingConcentrationCheck | None:
        return self._pending_check

    @property
    def history(self) -> ActionLog[CharacterSession]:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def undo_description(self) -> str | None:
        return self._history.undo_description()

    def redo_description(self) -> str | None:
        return self._history.redo_description()

    def recent_actions(self, count: int = DEFAULT_RECENT_ACTIONS) -> list[Action[CharacterSession]]:
        return self._history.recent_actions(count)

    # =========================================================================
    # Internals
    # =========================================================================

    def _publish(self, session: CharacterSession) -> None:
        self._session = session
        if session.concentrating_on is None:
            self._pending_check = None
        for listener in list(self._listeners):
            listener(session)

    def _commit(self, action_name: str, updates: dict[str, Any]) -> bool:
        """Apply field updates as one recorded action.

        Returns:
            True if the session changed, False for a no-op.
        """
        previous = self._session
        candidate = previous.model_copy(update=updates)
        if candidate == previous:
            self._logger.debug("No-op action skipped", action=action_name)
            return False

        new_session = candidate.model_copy(update={"last_modified": datetime.now()})
        self._history.push(action_name, previous, new_session)
        self._publish(new_session)
        self._logger.info("Session updated", action=action_name)
        return True

    def _hp_updates(self, hp: int) -> dict[str, Any]:
        """Field updates for setting HP, including the downed transition.

        Reaching 0 HP downs the character. Going down from standing also
        resets death saves and breaks concentration.
        """
        current = self._session
        hp = max(0, min(self._definition.max_hp, hp))
        updates: dict[str, Any] = {"current_hp": hp, "is_downed": hp == 0}
        if hp == 0 and not current.is_downed:
            updates["death_saves"] = DeathSaves()
            updates["concentrating_on"] = None
        return updates

    def _resource_updates(self, values: Iterable[tuple[ResourceDefinition, int]]) -> dict[str, Any]:
        """``resource_currents`` update for new resource values.

        Values equal to what the session already reports, including a
        missing key read as the maximum, are left out; if none remain the
        update is empty.
        """
        session = self._session
        changed = {r.id: value for r, value in values if value != session.resource_current(r)}
        if not changed:
            return {}
        return {"resource_currents": {**session.resource_currents, **changed}}

    # =========================================================================
    # Hit Points
    # =========================================================================

    def modify_hp(self, delta: int, *, name: str | None = None) -> bool:
        """Apply damage (negative) or healing (positive).

        Temporary HP absorbs damage first. If the damage actually lowered
        HP or temp HP and the character is still concentrating, a
        concentration check becomes pending with DC ``max(10, damage // 2)``.

        Args:
            delta: HP change.
            name: Action name for the history; defaults to ``"HP -7"`` style.

        Returns:
            True if the session changed.
        """
        hp, temp_hp = self._session.current_hp, self._session.temp_hp
        if delta < 0:
            damage = -delta
            absorbed = min(temp_hp, damage)
            temp_hp -= absorbed
            hp -= damage - absorbed
        else:
            hp += delta

        updates = self._hp_updates(hp)
        updates["temp_hp"] = max(0, temp_hp)
        changed = self._commit(name or f"HP {delta:+d}", updates)

        concentration = self._session.concentrating_on
        if changed and delta < 0 and concentration is not None:
            self._pending_check = PendingConcentrationCheck(
                spell_name=concentration.spell_name,
                dc=concentration_dc(-delta),
            )
            self._logger.info(
                "Concentration check pending",
                spell=concentration.spell_name,
                dc=self._pending_check.dc,
            )
        return changed

    def set_hp(self, value: int, *, name: str | None = None) -> bool:
        """Set HP directly, clamped to [0, max HP]."""
        return self._commit(name or f"Set HP to {value}", self._hp_updates(value))

    def set_temp_hp(self, value: int, *, name: str | None = None) -> bool:
        return self._commit(name or f"Set Temp HP to {value}", {"temp_hp": max(0, value)})

    def toggle_downed(self, *, name: str | None = None) -> bool:
        """Flip the downed flag without touching HP."""
        return self._commit(name or "Toggle Downed", {"is_downed": not self._session.is_downed})

    # =========================================================================
    # Death Saves
    # =========================================================================

    def add_death_success(self, *, name: str | None = None) -> bool:
        saves = self._session.death_saves
        updated = saves.model_copy(update={"successes": min(MAX_DEATH_SAVES, saves.successes + 1)})
        return self._commit(name or "Death Save Success", {"death_saves": updated})

    def add_death_failure(self, *, name: str | None = None) -> bool:
        saves = self._session.death_saves
        updated = saves.model_copy(update={"failures": min(MAX_DEATH_SAVES, saves.failures + 1)})
        return self._commit(name or "Death Save Failure", {"death_saves": updated})

    def reset_death_saves(self, *, name: str | None = None) -> bool:
        """Zero both death save counters and stand the character up."""
        return self._commit(
            name or "Reset Death Saves",
            {"death_saves": DeathSaves(), "is_downed": False},
        )

    # =========================================================================
    # Concentration
    # =========================================================================

    def set_concentration(
        self,
        spell_name: str,
        save_dc: int | None = None,
        *,
        name: str | None = None,
    ) -> bool:
        """Start concentrating on a spell, replacing any previous one."""
        info = ConcentrationInfo(spell_name=spell_name, save_dc=save_dc)
        changed = self._commit(name or f"Concentrating on {spell_name}", {"concentrating_on": info})
        if changed:
            self._pending_check = None
        return changed

    def break_concentration(self, *, name: str | None = None) -> bool:
        """End concentration and drop any pending check."""
        changed = self._commit(name or "Break Concentration", {"concentrating_on": None})
        self._pending_check = None
        return changed

    def dismiss_concentration_check(self) -> None:
        """Resolve the pending check as a pass; concentration is kept."""
        if self._pending_check is not None:
            self._logger.debug("Concentration check dismissed", spell=self._pending_check.spell_name)
        self._pending_check = None

    # =========================================================================
    # Resources
    # =========================================================================

    def modify_resource(self, resource_id: str, delta: int, *, name: str | None = None) -> bool:
        """Spend (negative) or regain (positive) uses of a resource.

        The value is clamped to [0, maximum]. Unknown resource ids are
        ignored.
        """
        resource = self._definition.get_resource(resource_id)
        if resource is None:
            self._logger.warning("Unknown resource ignored", resource_id=resource_id)
            return False

        current = self._session.resource_current(resource)
        value = max(0, min(resource.maximum, current + delta))
        verb = "Restore" if delta >= 0 else "Use"
        return self._commit(
            name or f"{verb} {resource.name or resource.id}",
            self._resource_updates([(resource, value)]),
        )

    def restore_resource(self, resource_id: str, *, name: str | None = None) -> bool:
        """Refill a resource to its maximum, whatever its recharge rule."""
        resource = self._definition.get_resource(resource_id)
        if resource is None:
            self._logger.warning("Unknown resource ignored", resource_id=resource_id)
            return False
        return self._commit(
            name or f"Restore {resource.name or resource.id}",
            self._resource_updates([(resource, resource.maximum)]),
        )

    # =========================================================================
    # Spells
    # =========================================================================

    def can_cast_spell(self, slot_level: int) -> bool:
        """Whether a slot of ``slot_level`` is left; cantrips always are."""
        if slot_level == 0:
            return True
        resource = self._definition.spell_slot_resource(slot_level)
        return resource is not None and self._session.resource_current(resource) > 0

    def cast_spell(
        self,
        spell_name: str,
        slot_level: int,
        *,
        concentration: bool | None = None,
        name: str | None = None,
    ) -> bool:
        """Cast a spell as one action: spend a slot, then concentrate if needed.

        Args:
            spell_name: Spell being cast.
            slot_level: Slot level spent; 0 for a cantrip, which spends nothing.
            concentration: Whether the spell needs concentration. Defaults
                to the flag on the matching spell of the sheet.
            name: Action name; defaults to ``"Cast Bless"``.

        Returns:
            True if the session changed. False if no slot of that level is
            left, in which case nothing happens.
        """
        if not self.can_cast_spell(slot_level):
            self._logger.warning("No spell slot available", spell=spell_name, slot_level=slot_level)
            return False

        updates: dict[str, Any] = {}
        if slot_level > 0:
            slot = self._definition.spell_slot_resource(slot_level)
            updates.update(self._resource_updates([(slot, self._session.resource_current(slot) - 1)]))

        if concentration is None:
            known = self._definition.get_spell(spell_name)
            concentration = known is not None and known.concentration
        if concentration:
            updates["concentrating_on"] = ConcentrationInfo(
                spell_name=spell_name,
                save_dc=self._definition.spell_save_dc,
            )

        changed = self._commit(name or f"Cast {spell_name}", updates)
        if changed and concentration:
            self._pending_check = None
        return changed

    # =========================================================================
    # Conditions
    # =========================================================================

    def add_condition(
        self,
        condition: ActiveCondition | str,
        *,
        name: str | None = None,
    ) -> bool:
        """Apply a condition; a bare name creates one with no countdown."""
        if isinstance(condition, str):
            condition = create_condition(condition)
        return self._commit(
            name or f"Add {condition.name}",
            {"conditions": [*self._session.conditions, condition]},
        )

    def remove_condition(self, condition_id: str, *, name: str | None = None) -> bool:
        removed = [c for c in self._session.conditions if c.id == condition_id]
        if not removed:
            self._logger.warning("Unknown condition ignored", condition_id=condition_id)
            return False
        remaining = [c for c in self._session.conditions if c.id != condition_id]
        return self._commit(name or f"Remove {removed[0].name}", {"conditions": remaining})

    def end_turn(self, *, name: str | None = None) -> bool:
        """Tick condition countdowns and drop the ones that run out."""
        ticked = [c.tick() for c in self._session.conditions]
        expired = [c.name for c in ticked if c.is_expired]
        remaining = [c for c in ticked if not c.is_expired]
        if expired:
            self._logger.info("Conditions expired", conditions=expired)
        return self._commit(name or "End Turn", {"conditions": remaining})

    # =========================================================================
    # Rests
    # =========================================================================

    def apply_rest(
        self,
        rest_type: RestType | str,
        selected_resource_ids: Iterable[str],
        hit_die_results: Iterable[int] = (),
        *,
        name: str | None = None,
    ) -> bool:
        """Apply a short or long rest.

        Selected resources that recharge on this rest are recomputed. A
        long rest also restores HP to maximum and clears temp HP, death
        saves, downed state and concentration. A short rest heals
        ``max(1, roll + CON modifier)`` per hit die rolled and spends that
        many dice from the hit-dice resource.

        Args:
            rest_type: ``"short"`` or ``"long"``.
            selected_resource_ids: Resources the player chose to recover.
            hit_die_results: Raw hit-die faces rolled on a short rest.
            name: Action name; defaults to ``"Short Rest"``/``"Long Rest"``.

        Returns:
            True if the session changed.
        """
        rest = RestType(rest_type)
        selected = set(selected_resource_ids)
        session = self._session

        recharged: dict[str, tuple[ResourceDefinition, int]] = {}
        for resource in get_resources_for_rest(self._definition.resource_definitions, rest):
            if resource.id in selected:
                value = calculate_recharge_amount(resource, session.resource_current(resource))
                recharged[resource.id] = (resource, value)

        updates: dict[str, Any] = {}
        if rest == RestType.LONG:
            updates.update(
                current_hp=self._definition.max_hp,
                temp_hp=0,
                death_saves=DeathSaves(),
                is_downed=False,
                concentrating_on=None,
            )
        else:
            rolls = list(hit_die_results)
            if rolls:
                con_modifier = self._definition.ability_modifier(Ability.CON)
                healing = sum(hit_die_healing(r, con_modifier) for r in rolls)
                updates.update(self._hp_updates(session.current_hp + healing))

                hit_dice = self._definition.hit_dice_resource
                if hit_dice is not None:
                    _, available = recharged.get(hit_dice.id, (hit_dice, session.resource_current(hit_dice)))
                    recharged[hit_dice.id] = (hit_dice, max(0, available - len(rolls)))
                self._logger.info("Hit dice spent", dice=len(rolls), healing=healing)

        updates.update(self._resource_updates(recharged.values()))
        return self._commit(name or f"{rest.value.title()} Rest", updates)

    # =========================================================================
    # History
    # =========================================================================

    def undo(self) -> HistoryStep[CharacterSession] | None:
        """Revert the last applied action.

        Returns:
            The undone step, or None if there is nothing to undo.
        """
        step = self._history.undo()
        if step is None:
            return None
        self._publish(step.restored_state)
        self._logger.info("Undo", action=step.action_name)
        return step

    def redo(self) -> HistoryStep[CharacterSession] | None:
        """Re-apply the last undone action.

        Returns:
            The redone step, or None if there is nothing to redo.
        """
        step = self._history.redo()
        if step is None:
            return None
        self._publish(step.restored_state)
        self._logger.info("Redo", action=step.action_name)
        return step


__all__ = [
    "PendingConcentrationCheck",
    "SessionEngine",
    "SessionListener",
    "concentration_dc",
]
