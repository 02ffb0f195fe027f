"""Protocol link schemas."""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


class LinkItem(BaseModel):
    """An animal that received a protocol, with its earliest stage date."""

    animal_id: Any
    number: str | None = None
    ear_tag: str | None = None
    start_date: date
    end_date: date


class LinkMeta(BaseModel):
    last_step_offset: int = 0
    reference_date: date


class LinkCollection(BaseModel):
    items: list[LinkItem] = Field(default_factory=list)
    meta: LinkMeta
