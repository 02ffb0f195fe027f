"""Tests for protocol loading, step offsets and category derivation."""

import json

import pytest
from sqlalchemy import text

from repro_engine.core.constants import CATEGORY_IATF, CATEGORY_PRE_SYNC
from repro_engine.core.exceptions import InvalidProtocolError, ProtocolNotFoundError
from repro_engine.services.protocol_service import (
    ProtocolService,
    derive_category,
    last_step_offset,
    step_offset,
)


@pytest.mark.parametrize("declared", ["IATF", "iatf", " Iatf "])
def test_iatf_category_any_case(declared):
    """Test IATF category detection."""
    assert derive_category(declared) == CATEGORY_IATF


@pytest.mark.parametrize("declared", ["PRE", "pre-sync", "", None, "IATF2"])
def test_other_types_are_pre_synchronization(declared):
    """Test the pre-synchronization fallback category."""
    assert derive_category(declared) == CATEGORY_PRE_SYNC


def test_step_offset_defaults_to_position():
    """Test step offset keys and fallbacks."""
    assert step_offset({"dia": 7}, 3) == 7
    assert step_offset({"dia": "10"}, 0) == 10
    assert step_offset({"dia": -2}, 1) == -2
    assert step_offset({"day": 4}, 0) == 4
    assert step_offset({"offset_dias": 9.0}, 0) == 9
    assert step_offset({"acao": "IA"}, 2) == 2
    assert step_offset({"dia": "amanhã"}, 1) == 1
    assert step_offset({"dia": None}, 4) == 4
    assert step_offset({"dia": True}, 3) == 3
    assert step_offset("not a step", 5) == 5


def test_last_step_offset_has_floor_zero():
    """Test the last step offset floor."""
    assert last_step_offset([{"dia": 0}, {"dia": 9}, {"dia": 7}]) == 9
    assert last_step_offset([{"dia": -3}]) == 0
    assert last_step_offset([]) == 0


@pytest.mark.asyncio
async def test_load_protocol(db_session, schema, sample_protocols):
    """Test loading a protocol."""
    service = ProtocolService(db_session, schema)

    protocol = await service.load_protocol("p-iatf")

    assert protocol.id == "p-iatf"
    assert protocol.name == "IATF 3 manejos"
    assert protocol.category == CATEGORY_IATF
    assert [s["dia"] for s in protocol.steps] == [0, 7, 10]


@pytest.mark.asyncio
async def test_load_protocol_not_found(db_session, schema, sample_protocols):
    """Test loading an unknown protocol."""
    service = ProtocolService(db_session, schema)

    with pytest.raises(ProtocolNotFoundError) as exc:
        await service.load_protocol("missing")
    assert exc.value.http_status == 404


@pytest.mark.asyncio
async def test_load_protocol_scoped_by_owner(db_session, schema, sample_protocols):
    """Test tenant scoping of protocol lookup."""
    service = ProtocolService(db_session, schema)

    assert (await service.load_protocol("p-farm2", owner_id="farm-2")).name == "IATF fazenda 2"
    with pytest.raises(ProtocolNotFoundError):
        await service.load_protocol("p-farm2", owner_id="farm-1")


@pytest.mark.asyncio
async def test_load_protocol_without_steps(db_session, schema, sample_protocols):
    """Test loading a protocol with no steps."""
    service = ProtocolService(db_session, schema)

    with pytest.raises(InvalidProtocolError):
        await service.load_protocol("p-empty")

    protocol = await service.load_protocol("p-empty", require_steps=False)
    assert protocol.steps == []


@pytest.mark.asyncio
async def test_steps_stored_as_text(db_session, schema):
    """Test steps stored as serialized text."""
    await db_session.execute(
        text("INSERT INTO repro_protocolo (id, nome, tipo, etapas) VALUES (:id, :nome, :tipo, :etapas)"),
        [
            {"id": "p-text", "nome": "Texto", "tipo": "IATF", "etapas": json.dumps([{"dia": 0}, {"dia": 9}])},
            {"id": "p-object", "nome": "Objeto", "tipo": "IATF", "etapas": json.dumps({"dia": 0})},
        ],
    )
    await db_session.commit()
    service = ProtocolService(db_session, schema)

    protocol = await service.load_protocol("p-text")
    assert [s["dia"] for s in protocol.steps] == [0, 9]

    with pytest.raises(InvalidProtocolError):
        await service.load_protocol("p-object")
