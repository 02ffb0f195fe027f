"""Application engine: applies a protocol to a cohort and cancels protocol runs.

An application has no stored record of its own. It exists only as the
application id shared by the stage events one ``apply_protocol`` call inserts.
"""

import uuid
from datetime import timedelta
from typing import Any

from loguru import logger
from sqlalchemy import delete, func, insert, select, update

from repro_engine.core.constants import ORIGIN_PROTOCOL_KEY
from repro_engine.schemas.application import ApplicationResult, CancellationResult
from repro_engine.schemas.event import StageEvent
from repro_engine.schemas.protocol import ProtocolDefinition
from repro_engine.services.base_service import BaseService, encode_date, encode_json
from repro_engine.services.protocol_service import ProtocolService, step_offset
from repro_engine.utils.dates import parse_date

# Sentinel for "leave this pointer alone"
_UNSET = object()


class ApplicationService(BaseService):
    """Transactional apply/cancel operations over stage events."""

    async def apply_protocol(
        self,
        protocol_id: Any,
        animal_ids: list[Any],
        start_date: Any,
        common_details: dict[str, Any] | None = None,
        owner_id: Any = None,
    ) -> ApplicationResult:
        """Apply a protocol to every animal of the cohort, all-or-nothing.

        For each animal, stage events dated on or after the start date are
        deleted first, so re-applying from the same date replaces rather than
        duplicates. The whole cohort runs in one transaction; any failure rolls
        everything back and is re-raised.
        """
        try:
            self.events.require("animal", "date", "type")
            start = parse_date(start_date)
            protocol = await ProtocolService(self.db, self.schema).load_protocol(
                protocol_id, owner_id
            )
            application_id = str(uuid.uuid4())
            # A repeated id would clear the stages its first pass just inserted
            animal_ids = list(dict.fromkeys(animal_ids))

            created: list[StageEvent] = []
            for animal_id in animal_ids:
                await self._clear_future_stages(animal_id, start, owner_id)
                created.extend(
                    await self._insert_stages(
                        protocol, animal_id, start, application_id, common_details, owner_id
                    )
                )
                await self.update_animal_pointers(
                    animal_id,
                    owner_id,
                    reproductive_status=protocol.category,
                    current_protocol=protocol.id,
                    current_application=application_id,
                )
                logger.debug(f"Animal {animal_id}: {len(protocol.steps)} stages scheduled")

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Applied protocol {protocol.id} to {len(animal_ids)} animal(s) from {start} "
            f"(application {application_id}, {len(created)} events)"
        )
        return ApplicationResult(application_id=application_id, events=created)

    async def cancel_application(
        self,
        application_id: str,
        owner_id: Any = None,
    ) -> CancellationResult:
        """Delete every event of an application and clear the animals' pointers.

        Reproductive status is left as is. Runs in one transaction.
        """
        ev = self.events
        try:
            ev.require("application", "animal")
            app_col = ev.column("application")
            animal_col = ev.column("animal")
            scope = [app_col == application_id, *ev.owner_filter(owner_id)]

            result = await self.db.execute(select(animal_col).where(*scope).distinct())
            affected = [row[0] for row in result.all()]

            await self.db.execute(delete(ev.table).where(*scope))

            if self.animals.has("current_protocol") or self.animals.has("current_application"):
                for animal_id in affected:
                    await self.update_animal_pointers(
                        animal_id,
                        owner_id,
                        current_protocol=None,
                        current_application=None,
                    )

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Cancelled application {application_id} ({len(affected)} animal(s))")
        return CancellationResult(affected_animal_count=len(affected))

    async def update_animal_pointers(
        self,
        animal_id: Any,
        owner_id: Any = None,
        reproductive_status: str | None = None,
        current_protocol: Any = _UNSET,
        current_application: Any = _UNSET,
    ) -> bool:
        """Write the animal's status and pointer columns that exist.

        A pointer passed as None is cleared; one left unset is not touched.
        Values are bound as given so the column type decides the storage form.
        No statement is issued when no domain column needs setting.
        Returns whether an UPDATE was executed.
        """
        an = self.animals
        if an.id is None:
            return False

        values: dict[str, Any] = {}
        status_col = an.column("reproductive_status")
        if status_col is not None and reproductive_status:
            values[status_col.name] = reproductive_status
        for logical, value in (
            ("current_protocol", current_protocol),
            ("current_application", current_application),
        ):
            col = an.column(logical)
            if col is None or value is _UNSET:
                continue
            values[col.name] = value

        if not values:
            return False
        if an.updated is not None:
            values[an.updated.name] = func.now()

        await self.db.execute(
            update(an.table)
            .where(an.id == animal_id, *an.owner_filter(owner_id))
            .values(values)
        )
        return True

    async def _clear_future_stages(self, animal_id: Any, start, owner_id: Any) -> None:
        ev = self.events
        date_col = ev.column("date")
        await self.db.execute(
            delete(ev.table).where(
                *self.stage_filters(owner_id),
                ev.column("animal") == animal_id,
                date_col >= encode_date(date_col, start),
            )
        )

    async def _insert_stages(
        self,
        protocol: ProtocolDefinition,
        animal_id: Any,
        start,
        application_id: str,
        common_details: dict[str, Any] | None,
        owner_id: Any,
    ) -> list[StageEvent]:
        ev = self.events
        date_col = ev.column("date")
        details_col = ev.column("details")
        protocol_col = ev.column("protocol")
        application_col = ev.column("application")

        created = []
        for index, step in enumerate(protocol.steps):
            stage_date = start + timedelta(days=step_offset(step, index))
            details = {
                **(common_details or {}),
                **step,
                ORIGIN_PROTOCOL_KEY: protocol.name,
            }

            values: dict[str, Any] = {
                ev.column("animal").name: animal_id,
                date_col.name: encode_date(date_col, stage_date),
                ev.column("type").name: self.schema.stage_event_type,
            }
            if details_col is not None:
                values[details_col.name] = encode_json(details_col, details)
            if protocol_col is not None:
                values[protocol_col.name] = protocol.id
            if application_col is not None:
                values[application_col.name] = application_id
            if ev.owner is not None and owner_id is not None:
                values[ev.owner.name] = owner_id
            if ev.updated is not None:
                values[ev.updated.name] = func.now()
            if ev.created is not None:
                values[ev.created.name] = func.now()

            result = await self.db.execute(
                insert(ev.table).values(values).returning(*ev.table.c)
            )
            created.append(self.to_stage_event(result.one()))
        return created
