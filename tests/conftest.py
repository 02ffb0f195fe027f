"""Pytest configuration and fixtures."""

from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from repro_engine.db import models_registry  # noqa: F401 - Import to register models
from repro_engine.db.base import Base
from repro_engine.engine import ReproductionEngine
from repro_engine.models.animal import Animal
from repro_engine.models.event import ReproEvent
from repro_engine.models.protocol import ReproProtocol
from repro_engine.services.schema_adapter import SchemaAdapter, SchemaMapping

# Test database URL (in-memory SQLite, one shared connection)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

IATF_STEPS = [
    {"dia": 0, "hormonio": "Benzoato de estradiol", "acao": "Inserir implante"},
    {"dia": 7, "hormonio": "PGF2a", "acao": "Retirar implante"},
    {"dia": 10, "acao": "IA"},
]

# Offsets resolve to 0 (missing), 1 (non-numeric -> index) and 5 (numeric string)
PRE_SYNC_STEPS = [
    {"acao": "GnRH"},
    {"dia": "x", "acao": "PGF"},
    {"dia": "5", "acao": "Checagem"},
]

# Renamed columns, dates and payloads as TEXT, no application/owner/timestamp columns
VARIANT_DDL = [
    "CREATE TABLE repro_protocolo (uuid TEXT PRIMARY KEY, NOME TEXT, tipo TEXT, etapas TEXT)",
    """CREATE TABLE repro_evento (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        cow_id TEXT NOT NULL,
        dia TEXT NOT NULL,
        tipo TEXT NOT NULL,
        detalhes TEXT,
        protocolo_id TEXT
    )""",
    'CREATE TABLE animals (animal_id TEXT PRIMARY KEY, status_reprodutivo TEXT, "protocoloAtual" TEXT)',
]


def make_engine() -> AsyncEngine:
    return create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def make_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with the default schema."""
    engine = make_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with make_session_maker(test_engine)() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def schema(test_engine: AsyncEngine) -> SchemaMapping:
    """Schema mapping resolved against the default tables."""
    return await SchemaAdapter().discover(test_engine)


@pytest_asyncio.fixture(scope="function")
async def repro(test_engine: AsyncEngine, schema: SchemaMapping) -> ReproductionEngine:
    """Engine facade over the test database."""
    return ReproductionEngine(make_session_maker(test_engine), schema)


@pytest_asyncio.fixture(scope="function")
async def sample_protocols(db_session: AsyncSession) -> dict[str, ReproProtocol]:
    """Create sample protocols."""
    protocols = {
        "iatf": ReproProtocol(id="p-iatf", nome="IATF 3 manejos", tipo="iatf", etapas=IATF_STEPS),
        "pre": ReproProtocol(id="p-pre", nome="Pré-sincronização P4", tipo="PRE", etapas=PRE_SYNC_STEPS),
        "empty": ReproProtocol(id="p-empty", nome="Sem etapas", tipo="IATF", etapas=[]),
        "farm2": ReproProtocol(
            id="p-farm2", owner_id="farm-2", nome="IATF fazenda 2", tipo="IATF", etapas=IATF_STEPS
        ),
    }
    for protocol in protocols.values():
        db_session.add(protocol)
    await db_session.commit()
    return protocols


@pytest_asyncio.fixture(scope="function")
async def sample_animals(db_session: AsyncSession) -> dict[str, Animal]:
    """Create sample animals."""
    animals = {
        "A": Animal(id="A", owner_id="farm-1", numero="101", brinco="BR-101"),
        "B": Animal(id="B", owner_id="farm-1", numero="102", brinco="BR-102"),
        "C": Animal(id="C", owner_id="farm-2", numero="201"),
    }
    for animal in animals.values():
        db_session.add(animal)
    await db_session.commit()
    return animals


async def fetch_events(session: AsyncSession, **filters) -> list[dict]:
    """All rows of repro_evento matching column=value filters, ordered by date."""
    clauses = " AND ".join(f"{k} = :{k}" for k in filters) or "1 = 1"
    result = await session.execute(
        text(f"SELECT * FROM repro_evento WHERE {clauses} ORDER BY data, id"), filters
    )
    return [dict(row._mapping) for row in result.all()]


async def fetch_animal(session: AsyncSession, animal_id: str) -> dict:
    result = await session.execute(
        text("SELECT * FROM animals WHERE id = :id"), {"id": animal_id}
    )
    return dict(result.one()._mapping)


async def add_event(session: AsyncSession, **values) -> ReproEvent:
    """Insert an event directly through the ORM."""
    event = ReproEvent(**values)
    session.add(event)
    await session.commit()
    return event


@pytest_asyncio.fixture(scope="function")
async def variant_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Engine over tables with renamed columns and no optional columns."""
    engine = make_engine()
    async with engine.begin() as conn:
        for ddl in VARIANT_DDL:
            await conn.execute(text(ddl))
    yield engine
    await engine.dispose()
