"""
SQLAlchemy async engine and session management

The shopping cart only reads inventory (ticket types, seats, committed sold
counts) from the relational store, so a single read engine is enough.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


class Database:
    """Owns the async engine and hands out sessions (wired via the DI container)."""

    def __init__(self, *, db_url: str, pool_size: int = 10, echo: bool = False) -> None:
        engine_kwargs: dict = {'echo': echo, 'pool_pre_ping': True}
        # sqlite (tests) uses a static pool without size options
        if not db_url.startswith('sqlite'):
            engine_kwargs['pool_size'] = pool_size
        self._engine: AsyncEngine = create_async_engine(db_url, **engine_kwargs)
        self._session_maker = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        Logger.base.info(f'🔗 [DB] Engine created for {self._engine.url.render_as_string()}')

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async def dispose(self) -> None:
        await self._engine.dispose()
        Logger.base.info('🔌 [DB] Engine disposed')
