"""Data transfer objects returned by the engine."""

from repro_engine.schemas.application import (
    ActiveApplication,
    ApplicationResult,
    CancellationResult,
)
from repro_engine.schemas.event import StageEvent, StageEventList
from repro_engine.schemas.link import LinkCollection, LinkItem, LinkMeta
from repro_engine.schemas.protocol import ProtocolDefinition

__all__ = [
    "ActiveApplication",
    "ApplicationResult",
    "CancellationResult",
    "LinkCollection",
    "LinkItem",
    "LinkMeta",
    "ProtocolDefinition",
    "StageEvent",
    "StageEventList",
]
