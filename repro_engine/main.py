"""
Reproduction Protocol Engine - start-up and shutdown.

The host application enters ``lifespan()`` once and uses the yielded
``ReproductionEngine`` for every request.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from loguru import logger

from repro_engine.core.config import Settings, get_settings
from repro_engine.core.logging import setup_logging
from repro_engine.db.bootstrap import init_database
from repro_engine.db.session import build_engine, build_session_maker
from repro_engine.engine import ReproductionEngine


@asynccontextmanager
async def lifespan(
    settings: Settings | None = None,
    create_tables: bool = True,
) -> AsyncIterator[ReproductionEngine]:
    """Open the database, reflect the schema and yield the engine facade."""
    settings = settings or get_settings()
    setup_logging(settings)
    logger.info(f"Starting {settings.app_name} {settings.app_version}...")

    if settings.database_url.startswith("sqlite"):
        Path(settings.data_save_folder).mkdir(parents=True, exist_ok=True)

    engine = build_engine(settings.database_url, echo=settings.database_echo)
    try:
        if create_tables:
            await init_database(engine)
        repro = await ReproductionEngine.create(
            engine, settings, session_maker=build_session_maker(engine)
        )
        logger.info(f"{settings.app_name} ready")
        yield repro
    finally:
        await engine.dispose()
        logger.info(f"{settings.app_name} stopped")
