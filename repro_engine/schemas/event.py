"""Stage event schemas."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, Field


class StageEvent(BaseModel):
    """A protocol-derived stage event as read back from storage."""

    id: Any = None
    animal_id: Any
    date: dt.date
    type: str
    details: dict[str, Any] = Field(default_factory=dict)
    protocol_id: Any = None
    application_id: str | None = None
    owner_id: Any = None
    title: str | None = None


class StageEventList(BaseModel):
    """Stage events in a period, ordered by date."""

    items: list[StageEvent] = Field(default_factory=list)
