from contextlib import asynccontextmanager
from typing import AsyncGenerator
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_queue.db.base import Base, get_engine, get_session_factory

logger = logging.getLogger(__name__)


class Database:
    """
    Storage handle: one engine and session factory per process.

    Created at startup, handed to every component that needs storage and
    disposed at shutdown.
    """

    def __init__(self, database_url: str, pool_size: int = 10):
        self.url = database_url
        self.engine = get_engine(database_url, pool_size=pool_size)
        self.session_factory = get_session_factory(self.engine)
        logger.info("DB engine and session factory ready.")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Scoped session; the connection goes back to the pool on every exit path."""
        async with self.session_factory() as session:
            yield session

    async def create_all(self) -> None:
        import clinic_queue.db.models  # noqa: F401  (register tables)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("DB engine disposed")
