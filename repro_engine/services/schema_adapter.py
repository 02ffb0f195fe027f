"""Schema adapter: resolves physical columns of the protocol, event and animal tables.

Deployments differ in which optional columns exist and how some of them are
named, so every logical field has a list of candidate column names. Tables are
reflected once; the resulting ``SchemaMapping`` is passed explicitly to every
service.
"""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from sqlalchemy import Column, MetaData, Table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from repro_engine.core.config import Settings, get_settings
from repro_engine.core.exceptions import SchemaIncompleteError

ID_CANDIDATES = ["id", "uuid"]

PROTOCOL_FIELDS: dict[str, list[str]] = {
    "name": ["nome", "name"],
    "type": ["tipo", "type"],
    "steps": ["etapas", "steps"],
}

EVENT_FIELDS: dict[str, list[str]] = {
    "animal": ["animal_id", "cow_id"],
    "date": ["data", "dia"],
    "type": ["tipo"],
    "details": ["detalhes"],
    "result": ["resultado"],
    "protocol": ["protocolo_id"],
    "application": ["aplicacao_id"],
}

ANIMAL_FIELDS: dict[str, list[str]] = {
    "id": ["id", "animal_id", "uuid"],
    "reproductive_status": [
        "situacao_reprodutiva",
        "sit_reprodutiva",
        "status_reprodutivo",
        "situacao_rep",
        "situacao_repro",
        "estado",
    ],
    "current_protocol": [
        "protocolo_id_atual",
        "protocoloAtualId",
        "protocolo_atual_id",
        "protocolo_atual",
        "protocoloAtual",
        "protocolo_ativo",
        "protocoloAtivo",
    ],
    "current_application": [
        "aplicacao_id_atual",
        "aplicacaoAtualId",
        "aplicacao_atual_id",
        "aplicacao_atual",
        "aplicacaoAtual",
    ],
    "number": ["numero", "num", "number", "identificador"],
    "ear_tag": ["brinco", "ear_tag", "earTag", "brinc"],
}


def find_column(columns: list[str], candidates: list[str]) -> str | None:
    """Return the physical name of the first candidate present in ``columns``.

    Exact matches win over case-insensitive ones.
    """
    present = set(columns)
    for candidate in candidates:
        if candidate in present:
            return candidate
    by_lower = {c.lower(): c for c in columns}
    for candidate in candidates:
        physical = by_lower.get(candidate.lower())
        if physical:
            return physical
    return None


@dataclass(frozen=True)
class TableMapping:
    """Logical-to-physical column mapping for one table."""

    name: str
    table: Table | None = None
    id_column: str | None = None
    fields: dict[str, str] = field(default_factory=dict)
    owner_column: str | None = None
    created_column: str | None = None
    updated_column: str | None = None

    @property
    def available(self) -> bool:
        return self.table is not None

    @property
    def has_owner(self) -> bool:
        return self.owner_column is not None

    @property
    def has_created(self) -> bool:
        return self.created_column is not None

    @property
    def has_updated(self) -> bool:
        return self.updated_column is not None

    def has(self, logical: str) -> bool:
        return logical in self.fields

    def column(self, logical: str) -> Column | None:
        """Reflected column for a logical field, or None when unresolved."""
        physical = self.fields.get(logical)
        if physical is None or self.table is None:
            return None
        return self.table.c[physical]

    def physical(self, name: str | None) -> Column | None:
        """Reflected column by physical name."""
        if name is None or self.table is None:
            return None
        return self.table.c[name]

    @property
    def id(self) -> Column | None:
        return self.physical(self.id_column)

    @property
    def owner(self) -> Column | None:
        return self.physical(self.owner_column)

    @property
    def created(self) -> Column | None:
        return self.physical(self.created_column)

    @property
    def updated(self) -> Column | None:
        return self.physical(self.updated_column)

    def owner_filter(self, owner_id: Any) -> list[Any]:
        """WHERE clauses scoping to ``owner_id`` when the table supports it."""
        if owner_id is None or self.owner is None:
            return []
        return [self.owner == owner_id]

    def require(self, *logical: str) -> None:
        """Fail fast when any of ``logical`` cannot be resolved."""
        missing = [f for f in logical if f not in self.fields]
        if self.table is None or missing:
            raise SchemaIncompleteError(self.name, missing or list(logical))


@dataclass(frozen=True)
class SchemaMapping:
    """Resolved mappings for the three tables the engine works with."""

    protocol: TableMapping
    event: TableMapping
    animal: TableMapping
    stage_event_type: str = "PROTOCOLO_ETAPA"
    active_lookback: int = 5


class SchemaAdapter:
    """Reflects the engine's tables and resolves their column mapping."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    async def discover(self, bind: AsyncEngine | AsyncConnection) -> SchemaMapping:
        """Reflect all three tables and build the mapping.

        Accepts an engine (a connection is opened and closed here) or an
        already open connection.
        """
        if isinstance(bind, AsyncEngine):
            async with bind.connect() as conn:
                return await self.discover(conn)

        s = self.settings
        protocol = await self._map_table(bind, s.protocol_table, PROTOCOL_FIELDS, ID_CANDIDATES)
        event = await self._map_table(bind, s.event_table, EVENT_FIELDS, ID_CANDIDATES)
        # The animal id is resolved through its own candidate list
        animal_fields = {k: v for k, v in ANIMAL_FIELDS.items() if k != "id"}
        animal = await self._map_table(bind, s.animal_table, animal_fields, ANIMAL_FIELDS["id"])

        mapping = SchemaMapping(
            protocol=protocol,
            event=event,
            animal=animal,
            stage_event_type=s.stage_event_type,
            active_lookback=s.active_lookback,
        )
        logger.info(
            f"Schema resolved: {protocol.name}={sorted(protocol.fields)}, "
            f"{event.name}={sorted(event.fields)}, {animal.name}={sorted(animal.fields)}"
        )
        return mapping

    async def _map_table(
        self,
        conn: AsyncConnection,
        name: str,
        candidates: dict[str, list[str]],
        id_candidates: list[str],
    ) -> TableMapping:
        table = await self._reflect(conn, name)
        if table is None:
            return TableMapping(name=name)

        columns = [c.name for c in table.columns]
        fields = {}
        for logical, names in candidates.items():
            physical = find_column(columns, names)
            if physical is not None:
                fields[logical] = physical
            else:
                logger.debug(f"{name}: no column for optional field '{logical}'")

        s = self.settings
        return TableMapping(
            name=name,
            table=table,
            id_column=find_column(columns, id_candidates),
            fields=fields,
            owner_column=find_column(columns, [s.owner_column]),
            created_column=find_column(columns, [s.created_column]),
            updated_column=find_column(columns, [s.updated_column]),
        )

    async def _reflect(self, conn: AsyncConnection, name: str) -> Table | None:
        """Reflect one table; any catalog failure degrades to None."""
        schema = self.settings.db_schema

        def load(sync_conn) -> Table:
            return Table(name, MetaData(), schema=schema, autoload_with=sync_conn)

        try:
            return await conn.run_sync(load)
        except SQLAlchemyError as e:
            logger.warning(f"Could not reflect table '{name}': {e}")
            # A failed catalog query aborts the transaction on some backends
            await conn.rollback()
            return None
