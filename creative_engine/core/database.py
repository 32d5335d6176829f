"""Engine, session factory and lifecycle hooks for the creative store."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from creative_engine.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    echo=settings.database_echo,
    pool_pre_ping=True,
    pool_recycle=300,
)

session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def open_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for one store operation. Callers commit; errors roll back."""
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            try:
                await session.rollback()
            except Exception as rollback_exc:
                logger.warning("Rollback failed", extra={"error": repr(rollback_exc)})
            raise


async def init_db() -> None:
    """Create the engine's tables outside production; Alembic owns production schema."""
    from creative_engine.models import Base

    logger.info("Creating creative engine tables")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    logger.info("Disposing database engine")
    await engine.dispose()
