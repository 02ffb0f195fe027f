"""Active-application resolver.

Infers which protocol run governs an animal on a given date from the stage
events alone, without trusting the animal's cached pointer columns.
"""

from datetime import date
from typing import Any

from sqlalchemy import desc, func, select

from repro_engine.schemas.application import ActiveApplication
from repro_engine.services.base_service import BaseService
from repro_engine.utils.dates import coerce_stored_date, parse_optional_date


class ActiveApplicationService(BaseService):
    """Read-side aggregation of stage events per application."""

    async def resolve_active_application(
        self,
        animal_id: Any,
        reference_date: Any = None,
        owner_id: Any = None,
    ) -> ActiveApplication | None:
        """Return the application whose [first, last] stage dates contain the date.

        Events are grouped by application id when the event table has one,
        otherwise all of the animal's stage events form a single group. Only
        the most recent groups (by last stage date) are examined.
        """
        ev = self.events
        ev.require("animal", "date", "type")
        reference = parse_optional_date(reference_date, default=date.today())

        date_col = ev.column("date")
        app_col = ev.column("application")
        start = func.min(date_col).label("start")
        end = func.max(date_col).label("end")
        where = [*self.stage_filters(owner_id), ev.column("animal") == animal_id]

        if app_col is not None:
            query = (
                select(app_col.label("application_id"), start, end)
                .where(*where)
                .group_by(app_col)
            )
        else:
            query = select(start, end).where(*where)
        query = query.order_by(desc(end)).limit(self.schema.active_lookback)

        result = await self.db.execute(query)
        for row in result.all():
            if row.start is None or row.end is None:
                continue
            application_id = row.application_id if app_col is not None else None
            candidate = ActiveApplication(
                application_id=str(application_id) if application_id is not None else None,
                start=coerce_stored_date(row.start),
                end=coerce_stored_date(row.end),
            )
            if candidate.contains(reference):
                return candidate
        return None
