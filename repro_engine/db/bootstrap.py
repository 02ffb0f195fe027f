"""Default schema bootstrap for fresh deployments."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from repro_engine.db import models_registry  # noqa: F401 - Import to register models
from repro_engine.db.base import Base


async def init_database(engine: AsyncEngine) -> None:
    """Create the protocol, event and animal tables if they do not exist.

    Existing tables are left untouched, whatever columns they carry.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")
