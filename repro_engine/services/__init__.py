"""Service layer for protocol application and read-side queries."""

from repro_engine.services.active_application_service import ActiveApplicationService
from repro_engine.services.application_service import ApplicationService
from repro_engine.services.calendar_service import CalendarService
from repro_engine.services.link_service import LinkService
from repro_engine.services.protocol_service import ProtocolService
from repro_engine.services.schema_adapter import SchemaAdapter, SchemaMapping, TableMapping

__all__ = [
    "ActiveApplicationService",
    "ApplicationService",
    "CalendarService",
    "LinkService",
    "ProtocolService",
    "SchemaAdapter",
    "SchemaMapping",
    "TableMapping",
]
