"""Resource definitions: capped, rechargeable counters.

Spell slots, hit dice and class-feature charges are all resources. The
definition is owned by the character sheet and never changes during
play; only the current value lives in the session.
"""

from __future__ import annotations

from typing import Literal
from uuid import uuid4

from pydantic import Field

from dnd_tracker.models.base import TrackerModel
from dnd_tracker.models.enums import RechargeOn, ResourceCategory


RechargeAmount = Literal["full", "half"] | int
"""How much a resource restores: everything, half its maximum, or a flat amount."""


class ResourceDefinition(TrackerModel):
    """Static description of a resource and its recharge rule.

    Attributes:
        id: Stable identifier used as the key in ``resource_currents``.
        name: Display name ("1st Level Slots", "Ki Points").
        category: Kind of counter.
        maximum: Capacity of the counter.
        slot_level: Spell level for spell and pact slots.
        die_type: Die size for hit dice.
        recharge_on: Rest that restores this resource.
        recharge_amount: How much the rest restores.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(default="")
    category: ResourceCategory = Field(default=ResourceCategory.CUSTOM)
    maximum: int = Field(ge=0)
    slot_level: int | None = Field(default=None, ge=1, le=9)
    die_type: int | None = Field(default=None, ge=1)
    recharge_on: RechargeOn = Field(default=RechargeOn.LONG_REST)
    recharge_amount: RechargeAmount = Field(default="full")


__all__ = ["RechargeAmount", "ResourceDefinition"]
