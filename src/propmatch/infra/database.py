"""Async engine, session factory and schema bootstrap for the listing store."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from propmatch.app.config import get_settings


class Base(DeclarativeBase):
    """Declarative base shared by listings, leads, sessions and wizard config."""


settings = get_settings()

IS_SQLITE = settings.database_url.startswith("sqlite")

# SQLite: let requests share a connection and wait out a writer's lock
_SQLITE_CONNECT_ARGS = {"check_same_thread": False, "timeout": 30}

engine = create_async_engine(
    settings.database_url,
    connect_args=_SQLITE_CONNECT_ARGS if IS_SQLITE else {},
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency yielding one session per request.

    Services commit their own units of work; anything left uncommitted is
    discarded when the request ends.
    """
    async with async_session() as session:
        yield session


async def init_db():
    """Create missing tables. Existing tables are left as they are."""
    import propmatch.domain.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if IS_SQLITE:
        # availability reads proceed while a search writes its session
        async with engine.connect() as conn:
            await conn.execute(text("PRAGMA journal_mode=WAL"))
            await conn.execute(text("PRAGMA busy_timeout=30000"))
