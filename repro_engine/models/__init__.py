"""Default-schema database models."""

from repro_engine.models.animal import Animal
from repro_engine.models.event import ReproEvent
from repro_engine.models.protocol import ReproProtocol

__all__ = [
    "Animal",
    "ReproEvent",
    "ReproProtocol",
]
