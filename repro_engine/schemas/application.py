"""Application (protocol run) schemas."""

from datetime import date

from pydantic import BaseModel, Field

from repro_engine.schemas.event import StageEvent


class ApplicationResult(BaseModel):
    """Outcome of applying a protocol to a cohort."""

    application_id: str
    events: list[StageEvent] = Field(default_factory=list)


class CancellationResult(BaseModel):
    """Outcome of cancelling an application."""

    affected_animal_count: int = 0


class ActiveApplication(BaseModel):
    """Date span of the application in effect for an animal."""

    application_id: str | None = None
    start: date
    end: date

    def contains(self, reference: date) -> bool:
        return self.start <= reference <= self.end
