"""Reproduction engine facade.

The host application creates one ``ReproductionEngine`` at start-up; creation
reflects the schema once. Each operation then opens its own session: mutating
operations commit or roll back before returning, reads use a plain session.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from repro_engine.core.config import Settings
from repro_engine.db.session import build_session_maker
from repro_engine.schemas.application import (
    ActiveApplication,
    ApplicationResult,
    CancellationResult,
)
from repro_engine.schemas.event import StageEventList
from repro_engine.schemas.link import LinkCollection
from repro_engine.schemas.protocol import ProtocolDefinition
from repro_engine.services.active_application_service import ActiveApplicationService
from repro_engine.services.application_service import ApplicationService
from repro_engine.services.calendar_service import CalendarService
from repro_engine.services.link_service import LinkService
from repro_engine.services.protocol_service import ProtocolService
from repro_engine.services.schema_adapter import SchemaAdapter, SchemaMapping


class ReproductionEngine:
    """Entry point exposing the protocol operations to a controller layer."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        schema: SchemaMapping,
    ):
        self.session_maker = session_maker
        self.schema = schema

    @classmethod
    async def create(
        cls,
        engine: AsyncEngine,
        settings: Settings | None = None,
        session_maker: async_sessionmaker[AsyncSession] | None = None,
    ) -> "ReproductionEngine":
        """Reflect the schema once and build the facade."""
        schema = await SchemaAdapter(settings).discover(engine)
        return cls(session_maker or build_session_maker(engine), schema)

    async def load_protocol(self, protocol_id: Any, owner_id: Any = None) -> ProtocolDefinition:
        async with self.session_maker() as db:
            return await ProtocolService(db, self.schema).load_protocol(protocol_id, owner_id)

    async def apply_protocol(
        self,
        protocol_id: Any,
        animal_ids: list[Any],
        start_date: Any,
        common_details: dict[str, Any] | None = None,
        owner_id: Any = None,
    ) -> ApplicationResult:
        async with self.session_maker() as db:
            return await ApplicationService(db, self.schema).apply_protocol(
                protocol_id, animal_ids, start_date, common_details, owner_id
            )

    async def cancel_application(
        self, application_id: str, owner_id: Any = None
    ) -> CancellationResult:
        async with self.session_maker() as db:
            return await ApplicationService(db, self.schema).cancel_application(
                application_id, owner_id
            )

    async def resolve_active_application(
        self,
        animal_id: Any,
        reference_date: Any = None,
        owner_id: Any = None,
    ) -> ActiveApplication | None:
        async with self.session_maker() as db:
            return await ActiveApplicationService(db, self.schema).resolve_active_application(
                animal_id, reference_date, owner_id
            )

    async def collect_links(
        self,
        protocol_id: Any,
        status: str | None = None,
        reference_date: Any = None,
        owner_id: Any = None,
    ) -> LinkCollection:
        async with self.session_maker() as db:
            return await LinkService(db, self.schema).collect_links(
                protocol_id, status, reference_date, owner_id
            )

    async def list_stages_in_period(
        self,
        start_date: Any = None,
        end_date: Any = None,
        protocol_id: Any = None,
        owner_id: Any = None,
    ) -> StageEventList:
        async with self.session_maker() as db:
            return await CalendarService(db, self.schema).list_stages_in_period(
                start_date, end_date, protocol_id, owner_id
            )
