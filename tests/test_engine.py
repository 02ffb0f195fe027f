"""Tests for the engine facade and start-up."""

from datetime import date

import pytest

from repro_engine.core.config import Settings
from repro_engine.core.exceptions import ProtocolNotFoundError
from repro_engine.main import lifespan
from repro_engine.models.animal import Animal
from repro_engine.models.protocol import ReproProtocol


@pytest.mark.asyncio
async def test_facade_round_trip(repro, sample_protocols, sample_animals):
    """Test every operation through the engine facade."""
    protocol = await repro.load_protocol("p-iatf")
    assert protocol.category == "IATF"

    applied = await repro.apply_protocol("p-iatf", ["A", "B"], "2024-03-01", {"lote": 7})
    assert len(applied.events) == 6

    active = await repro.resolve_active_application("B", "2024-03-04")
    assert active.application_id == applied.application_id

    links = await repro.collect_links("p-iatf", status="ATIVO", reference_date="2024-03-04")
    assert {item.animal_id for item in links.items} == {"A", "B"}

    stages = await repro.list_stages_in_period("2024-03-08", "2024-03-08")
    assert [e.animal_id for e in stages.items] == ["A", "B"]

    cancelled = await repro.cancel_application(applied.application_id)
    assert cancelled.affected_animal_count == 2
    assert (await repro.list_stages_in_period()).items == []
    assert await repro.resolve_active_application("B", "2024-03-04") is None


@pytest.mark.asyncio
async def test_facade_propagates_errors(repro):
    """Test that facade calls raise engine errors."""
    with pytest.raises(ProtocolNotFoundError):
        await repro.load_protocol("missing")


@pytest.mark.asyncio
async def test_lifespan_creates_database(tmp_path):
    """Test start-up against a fresh SQLite file."""
    settings = Settings(data_save_folder=str(tmp_path / "data"), db_file="herd.db")

    async with lifespan(settings) as repro:
        assert repro.schema.event.available
        assert repro.schema.event.has("application")

        async with repro.session_maker() as db:
            db.add(ReproProtocol(id="p1", nome="IATF", tipo="IATF", etapas=[{"dia": 0}, {"dia": 2}]))
            db.add(Animal(id="A"))
            await db.commit()

        applied = await repro.apply_protocol("p1", ["A"], "2024-05-01")
        assert [e.date for e in applied.events] == [date(2024, 5, 1), date(2024, 5, 3)]

    assert (tmp_path / "data" / "herd.db").exists()
