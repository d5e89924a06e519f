# config/database.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.pool import StaticPool
from config.settings import settings
from model.db import Base

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


class Database:
    """
    Async SQLAlchemy engine + session factory for the relational store.

    In-memory SQLite URLs share one connection so every session sees the same data.
    """

    def __init__(
        self, url: str = settings.DATABASE_URL, echo: bool = settings.DATABASE_ECHO
    ) -> None:
        self.url = url
        self.echo = echo
        self.engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def dialect(self) -> str:
        if self.engine is None:
            raise RuntimeError("Database not initialized")
        return self.engine.dialect.name

    def upsert(self, entity):
        """
        Dialect INSERT construct that supports on_conflict_do_update.
        """
        insert = _UPSERT_DIALECTS.get(self.dialect)
        if insert is None:
            raise RuntimeError(f"Upsert not supported for dialect {self.dialect}")
        return insert(entity)

    async def startup(self) -> None:
        kwargs = {"echo": self.echo}
        if self.url.startswith("sqlite") and ":memory:" in self.url:
            kwargs.update(
                poolclass=StaticPool, connect_args={"check_same_thread": False}
            )
        self.engine = create_async_engine(self.url, **kwargs)
        self._sessions = async_sessionmaker(
            bind=self.engine, class_=AsyncSession, expire_on_commit=False
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("db.ready dialect=%s", self.engine.dialect.name)

    async def shutdown(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self._sessions = None
            logger.info("db.closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessions is None:
            raise RuntimeError("Database not initialized")
        async with self._sessions() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
