"""Protocol model - a named, ordered list of treatment steps."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from repro_engine.db.base import Base


class ReproProtocol(Base):
    """Reproduction protocol database model.

    Authoring lives outside this package; the engine only reads these rows.
    """

    __tablename__ = "repro_protocolo"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    nome: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # "IATF" or anything else (pre-synchronization)
    tipo: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    # [{"dia": 0, "hormonio": "...", "acao": "..."}, ...]
    etapas: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=True
    )

    __table_args__ = (Index("ix_repro_protocolo_nome", "nome"),)
