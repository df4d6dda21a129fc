"""Base model shared by every tracker schema.

Models are immutable snapshots: the session engine never mutates one in
place, it derives a new instance with ``model_copy``. Field names are
snake_case in Python and camelCase on the wire so that exported
characters round-trip through the browser app's JSON format.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TrackerModel(BaseModel):
    """Base class for all tracker models."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


__all__ = ["TrackerModel"]
