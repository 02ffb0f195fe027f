"""Async engine and session factory."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from repro_engine.core.config import get_settings


def build_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create an async engine for ``url`` (defaults to the configured URL)."""
    settings = get_settings()
    kwargs.setdefault("echo", settings.database_echo)
    return create_async_engine(url or settings.database_url, **kwargs)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by the engine facade."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
