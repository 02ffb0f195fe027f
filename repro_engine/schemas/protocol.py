"""Protocol schemas."""

from typing import Any

from pydantic import BaseModel, Field


class ProtocolDefinition(BaseModel):
    """A loaded protocol with its decoded steps and derived category."""

    id: Any
    name: str | None = None
    type: str | None = None
    category: str
    steps: list[dict[str, Any]] = Field(default_factory=list)
