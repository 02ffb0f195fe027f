"""Period event lister feeding the calendar view."""

from typing import Any

from sqlalchemy import select

from repro_engine.schemas.event import StageEventList
from repro_engine.services.base_service import BaseService, encode_date
from repro_engine.utils.dates import parse_optional_date


class CalendarService(BaseService):
    """Read-only listing of stage events by date range."""

    async def list_stages_in_period(
        self,
        start_date: Any = None,
        end_date: Any = None,
        protocol_id: Any = None,
        owner_id: Any = None,
    ) -> StageEventList:
        """List stage events dated within [start_date, end_date].

        A missing bound leaves that side of the range open. Ordered by date,
        then by creation time when the table records it.
        """
        ev = self.events
        ev.require("date", "type")
        start = parse_optional_date(start_date)
        end = parse_optional_date(end_date)

        date_col = ev.column("date")
        where = self.stage_filters(owner_id)
        if start is not None:
            where.append(date_col >= encode_date(date_col, start))
        if end is not None:
            where.append(date_col <= encode_date(date_col, end))
        if protocol_id is not None:
            protocol_col = ev.column("protocol")
            if protocol_col is None:
                return StageEventList(items=[])
            where.append(protocol_col == protocol_id)

        order = [date_col]
        if ev.created is not None:
            order.append(ev.created)
        if ev.id is not None:
            order.append(ev.id)

        result = await self.db.execute(select(ev.table).where(*where).order_by(*order))
        return StageEventList(items=[self.to_stage_event(row) for row in result.all()])
