# db/database.py

import logging
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession

from .. import config
from .base import Base

logger = logging.getLogger(__name__)


def to_async_url(database_url: str) -> str:
    """Selects the asynchronous driver for plain database URLs."""
    # 'postgresql://' -> 'postgresql+psycopg://' (psycopg 3 async)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    url = to_async_url(database_url)
    if url.startswith("sqlite"):
        # SQLite picks its own pool; pool sizing options do not apply
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        echo=echo,
        pool_size=10,
        max_overflow=5,
        pool_pre_ping=True,
    )


# --- Database Engine Setup ---

engine = build_engine(config.DATABASE_URL, echo=config.SQL_ECHO)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,  # ORM objects stay readable after commit
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a managed AsyncSession to FastAPI endpoints.
    Commits on success and rolls back on any error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_db_and_tables(bind: AsyncEngine = engine) -> None:
    """
    Creates all defined tables in the database.
    """
    async with bind.begin() as conn:
        # Import all model modules so that SQLAlchemy knows about them
        from ..models import transaction, raw_message, setting  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready.")
