"""
Model registry for the default schema.

Import all models here to ensure they are registered with SQLAlchemy metadata
before ``init_database`` calls ``create_all``.
"""

from repro_engine.db.base import Base
from repro_engine.models.animal import Animal
from repro_engine.models.event import ReproEvent
from repro_engine.models.protocol import ReproProtocol

__all__ = [
    "Base",
    "Animal",
    "ReproEvent",
    "ReproProtocol",
]
