# python
"""Database engine and session utilities.

The :class:`Database` object owns the asynchronous engine and session factory
for the conversation store. One instance is constructed by the application
factory and shared by every request through ``app.state``. The engine is built
lazily on first use, so an anonymous chat never needs a configured database,
and it lives until ``dispose()`` runs at application shutdown.
"""
import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.exceptions.base import StorageError
from models import Base

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    if not url.startswith("sqlite"):
        return False
    return ":memory:" in url or url.split("://", 1)[-1] in ("", "/")


class Database:
    """Process-scoped holder for the async engine and session factory."""

    def __init__(self, url: str | None, echo: bool = False, **engine_kwargs: Any):
        self.url = (url or "").strip()
        self.echo = echo
        self.engine_kwargs = engine_kwargs
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            if not self.url:
                raise StorageError(
                    "Database is not configured",
                    details="Set DATABASE_URL (e.g. postgresql+asyncpg://<user>:<pass>@<host>/<db>)",
                )
            kwargs = dict(self.engine_kwargs)
            if _is_memory_sqlite(self.url):
                # In-memory SQLite lives in a single connection
                kwargs.setdefault("poolclass", StaticPool)
                kwargs.setdefault("connect_args", {"check_same_thread": False})
            self._engine = create_async_engine(self.url, echo=self.echo, **kwargs)
            logger.info("Database engine created for %s", self._engine.url.render_as_string(hide_password=True))
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> bool:
        """Return True when a trivial query succeeds."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
