"""Link collector: animals that received a given protocol."""

from datetime import date, timedelta
from typing import Any

from sqlalchemy import and_, desc, func, null, select

from repro_engine.core.constants import STATUS_ACTIVE
from repro_engine.schemas.link import LinkCollection, LinkItem, LinkMeta
from repro_engine.services.base_service import BaseService
from repro_engine.services.protocol_service import ProtocolService, last_step_offset
from repro_engine.utils.dates import coerce_stored_date, parse_optional_date


class LinkService(BaseService):
    """Lists the animals linked to a protocol through its stage events."""

    async def collect_links(
        self,
        protocol_id: Any,
        status: str | None = None,
        reference_date: Any = None,
        owner_id: Any = None,
    ) -> LinkCollection:
        """List every animal with stage events of the protocol.

        Each animal's application start is its earliest stage date for the
        protocol; results are ordered by start, newest first. With status
        "ATIVO" only animals whose start + last step offset is on or after the
        reference date are kept.
        """
        reference = parse_optional_date(reference_date, default=date.today())
        protocol = await ProtocolService(self.db, self.schema).load_protocol(
            protocol_id, owner_id, require_steps=False
        )
        last_offset = last_step_offset(protocol.steps)
        meta = LinkMeta(last_step_offset=last_offset, reference_date=reference)

        ev = self.events
        if not all(ev.has(f) for f in ("animal", "date", "type", "protocol")):
            return LinkCollection(items=[], meta=meta)

        wants_active = str(status or "").strip().upper() == STATUS_ACTIVE
        items = []
        for row in await self._linked_rows(protocol.id, owner_id):
            start = coerce_stored_date(row.start_date)
            if start is None:
                continue
            end = start + timedelta(days=last_offset)
            if wants_active and end < reference:
                continue
            items.append(
                LinkItem(
                    animal_id=row.animal_id,
                    number=_text(row.number),
                    ear_tag=_text(row.ear_tag),
                    start_date=start,
                    end_date=end,
                )
            )
        return LinkCollection(items=items, meta=meta)

    async def _linked_rows(self, protocol_id: Any, owner_id: Any) -> list:
        ev = self.events
        animal_col = ev.column("animal")
        apps = (
            select(
                animal_col.label("animal_id"),
                func.min(ev.column("date")).label("start_date"),
            )
            .where(*self.stage_filters(owner_id), ev.column("protocol") == protocol_id)
            .group_by(animal_col)
            .subquery("apps")
        )

        an = self.animals
        joined = apps
        number_col = ear_tag_col = None
        if an.id is not None:
            joined = apps.outerjoin(
                an.table, and_(an.id == apps.c.animal_id, *an.owner_filter(owner_id))
            )
            number_col = an.column("number")
            ear_tag_col = an.column("ear_tag")
        query = (
            select(
                apps.c.animal_id,
                apps.c.start_date,
                (number_col if number_col is not None else null()).label("number"),
                (ear_tag_col if ear_tag_col is not None else null()).label("ear_tag"),
            )
            .select_from(joined)
            .order_by(desc(apps.c.start_date))
        )
        result = await self.db.execute(query)
        return result.all()


def _text(value: Any) -> str | None:
    return None if value is None else str(value)
