"""Reproductive event model - stage events and other herd events."""

from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Date, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from repro_engine.db.base import Base


class ReproEvent(Base):
    """Reproductive event database model.

    Protocol stage events carry tipo=PROTOCOLO_ETAPA, the source protocol id
    and the shared application id of the run that generated them.
    """

    __tablename__ = "repro_evento"

    # SQLite requires INTEGER (not BIGINT) for autoincrement
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    animal_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    data: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    tipo: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    detalhes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    resultado: Mapped[str | None] = mapped_column(Text, nullable=True)

    protocolo_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    aplicacao_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=True
    )

    __table_args__ = (
        Index("ix_repro_evento_animal_tipo_data", "animal_id", "tipo", "data"),
        Index("ix_repro_evento_protocolo_tipo", "protocolo_id", "tipo"),
    )
