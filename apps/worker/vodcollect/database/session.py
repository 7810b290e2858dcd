"""
Async engine and session management
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ..config import settings
from ..models import Base
from ..logging_config import get_logger

logger = get_logger(__name__)


class Database:
    """Owns the async engine and hands out sessions"""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.async_database_url

        if self.url.startswith("sqlite") and ":memory:" in self.url:
            # One shared connection so the in-memory database survives across sessions.
            # Concurrent sessions share its transaction; use a file URL when they overlap.
            self.engine = create_async_engine(
                self.url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        elif self.url.startswith("sqlite"):
            self.engine = create_async_engine(self.url)
        else:
            self.engine = create_async_engine(
                self.url,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_pre_ping=True,
            )

        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Session scope; rolls back on error"""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self):
        """Create tables directly from the models (tests and local bootstrap)"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema created")

    async def dispose(self):
        await self.engine.dispose()
