"""
Junkick Backend — Database Session Management
===============================================

What:  The persistence client (engine + session factory), the declarative
       base, and the FastAPI session dependency.
Why:   All connection handling lives in one object that is constructed
       explicitly at startup and handed to request handlers, so tests and
       the snapshot importer can build their own against another URL.
How:   `Database` wraps an async engine. The app lifespan creates one, stores
       it on `app.state.database` and disposes it on shutdown. The session
       dependency commits on success and rolls back on any error.

Lifecycle:
    open once at process start → one session per request → dispose on
    shutdown. A disposed Database is never reopened implicitly.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from junkick.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they share one metadata object,
    which Alembic and `Database.create_all()` read.
    """
    pass


def _engine_options(url: str, config: Settings) -> Dict[str, Any]:
    """Pool options for server databases; SQLite uses its own pool classes."""
    options: Dict[str, Any] = {"echo": config.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


class Database:
    """
    Explicitly constructed persistence client.

    Usage:
        database = Database(settings.database_url)
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, url: str, config: Optional[Settings] = None):
        config = config or default_settings
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **_engine_options(url, config))
        # expire_on_commit=False: response models read attributes after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._disposed = False

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Transactional session scope: commit on success, rollback on error.

        Raises:
            RuntimeError: The client was already disposed.
        """
        if self._disposed:
            raise RuntimeError("Database client has been disposed")
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create every mapped table (tests and local bootstrap; prod uses Alembic)."""
        # Importing the models package registers every table with Base.metadata
        import junkick.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all pooled connections. Called once, on shutdown."""
        if not self._disposed:
            await self.engine.dispose()
            self._disposed = True


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The session comes from the Database stored on `app.state` by the
    lifespan (or by a test fixture). Commit happens after the route returns;
    any exception rolls the whole request back, so a rejected mutation never
    leaves a partial write.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
