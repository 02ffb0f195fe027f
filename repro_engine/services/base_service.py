"""Base service with the column codecs shared by the protocol services."""

import json
from datetime import date, datetime
from typing import Any

from sqlalchemy import Column
from sqlalchemy import types as sqltypes
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from repro_engine.core.constants import TITLE_KEYS
from repro_engine.schemas.event import StageEvent
from repro_engine.services.schema_adapter import SchemaMapping, TableMapping
from repro_engine.utils.dates import coerce_stored_date


def encode_date(column: Column, value: date) -> Any:
    """Bind value for a date column: a date for DATE types, ISO text otherwise."""
    if isinstance(column.type, sqltypes.DateTime):
        return datetime.combine(value, datetime.min.time())
    if isinstance(column.type, sqltypes.Date):
        return value
    return value.isoformat()


def encode_json(column: Column, payload: Any) -> Any:
    """Bind value for a JSON payload: native for JSON types, serialized otherwise."""
    if isinstance(column.type, sqltypes.JSON):
        return payload
    return json.dumps(payload, ensure_ascii=False, default=str)


def decode_json(value: Any, default: Any = None) -> Any:
    """Decode a payload that may be stored natively or as serialized text."""
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return default if value is None else value


def stage_title(details: dict[str, Any], fallback: str) -> str:
    """Display title for a stage event."""
    for key in TITLE_KEYS:
        if details.get(key):
            return str(details[key])
    return fallback


class BaseService:
    """Base service holding the session and the resolved schema mapping."""

    def __init__(self, db: AsyncSession, schema: SchemaMapping):
        self.db = db
        self.schema = schema

    @property
    def protocols(self) -> TableMapping:
        return self.schema.protocol

    @property
    def events(self) -> TableMapping:
        return self.schema.event

    @property
    def animals(self) -> TableMapping:
        return self.schema.animal

    def stage_filters(self, owner_id: Any = None) -> list[Any]:
        """WHERE clauses selecting stage events, tenant-scoped when possible."""
        return [
            self.events.column("type") == self.schema.stage_event_type,
            *self.events.owner_filter(owner_id),
        ]

    def to_stage_event(self, row: Row) -> StageEvent:
        """Convert a full event row (SELECT or RETURNING) to a StageEvent."""
        ev = self.events
        data = row._mapping

        def value(col: Column | None) -> Any:
            return data[col] if col is not None else None

        details = decode_json(value(ev.column("details")), {})
        if not isinstance(details, dict):
            details = {}
        event_type = value(ev.column("type")) or self.schema.stage_event_type
        application_id = value(ev.column("application"))

        return StageEvent(
            id=value(ev.id),
            animal_id=value(ev.column("animal")),
            date=coerce_stored_date(value(ev.column("date"))),
            type=event_type,
            details=details,
            protocol_id=value(ev.column("protocol")),
            application_id=str(application_id) if application_id is not None else None,
            owner_id=value(ev.owner),
            title=stage_title(details, event_type),
        )
