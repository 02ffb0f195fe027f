"""Animal model - only the columns the protocol engine touches."""

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from repro_engine.db.base import Base


class Animal(Base):
    """Animal database model.

    The status and pointer columns are denormalized caches maintained by
    protocol application and cancellation.
    """

    __tablename__ = "animals"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    owner_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    numero: Mapped[str | None] = mapped_column(String(64), nullable=True)
    brinco: Mapped[str | None] = mapped_column(String(64), nullable=True)

    situacao_reprodutiva: Mapped[str | None] = mapped_column(String(64), nullable=True)
    protocolo_id_atual: Mapped[str | None] = mapped_column(String(64), nullable=True)
    aplicacao_id_atual: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=True
    )
