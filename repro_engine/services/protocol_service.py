"""Protocol loader: reads one protocol, decodes its steps, derives its category."""

import math
from typing import Any

from loguru import logger
from sqlalchemy import select

from repro_engine.core.constants import CATEGORY_IATF, CATEGORY_PRE_SYNC, STEP_OFFSET_KEYS
from repro_engine.core.exceptions import InvalidProtocolError, ProtocolNotFoundError
from repro_engine.schemas.protocol import ProtocolDefinition
from repro_engine.services.base_service import BaseService, decode_json


def derive_category(protocol_type: Any) -> str:
    """IATF protocols map to "IATF", everything else to pre-synchronization."""
    if str(protocol_type or "").strip().upper() == CATEGORY_IATF:
        return CATEGORY_IATF
    return CATEGORY_PRE_SYNC


def step_offset(step: Any, index: int) -> int:
    """Day offset of a step, falling back to its position when not numeric."""
    if not isinstance(step, dict):
        return index
    for key in STEP_OFFSET_KEYS:
        if key not in step:
            continue
        raw = step[key]
        if isinstance(raw, bool):
            return index
        try:
            offset = float(raw)
        except (TypeError, ValueError):
            return index
        return int(offset) if math.isfinite(offset) else index
    return index


def last_step_offset(steps: list[Any]) -> int:
    """Latest step offset of a protocol, never below zero."""
    return max([0, *(step_offset(s, i) for i, s in enumerate(steps))])


class ProtocolService(BaseService):
    """Loads protocol definitions from the protocol table."""

    async def load_protocol(
        self,
        protocol_id: Any,
        owner_id: Any = None,
        require_steps: bool = True,
    ) -> ProtocolDefinition:
        """Load a protocol by id, optionally scoped to a tenant.

        Raises:
            ProtocolNotFoundError: no row matches.
            InvalidProtocolError: the steps do not decode to a non-empty list
                (only when ``require_steps`` is set).
        """
        pt = self.protocols
        if pt.id is None:
            # Without an id column no protocol can be addressed
            raise ProtocolNotFoundError(protocol_id)

        query = (
            select(pt.table)
            .where(pt.id == protocol_id, *pt.owner_filter(owner_id))
            .limit(1)
        )
        result = await self.db.execute(query)
        row = result.first()
        if row is None:
            raise ProtocolNotFoundError(protocol_id)

        data = row._mapping
        steps_col = pt.column("steps")
        steps = decode_json(data[steps_col], []) if steps_col is not None else []
        if not isinstance(steps, list):
            steps = []
        if require_steps and not steps:
            raise InvalidProtocolError(protocol_id)

        name_col = pt.column("name")
        type_col = pt.column("type")
        protocol_type = data[type_col] if type_col is not None else None

        protocol = ProtocolDefinition(
            id=data[pt.id],
            name=data[name_col] if name_col is not None else None,
            type=protocol_type,
            category=derive_category(protocol_type),
            steps=[s if isinstance(s, dict) else {} for s in steps],
        )
        logger.debug(
            f"Loaded protocol {protocol.id} ({protocol.name}) with {len(protocol.steps)} steps"
        )
        return protocol
