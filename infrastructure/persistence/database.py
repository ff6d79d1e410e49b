import logging
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from infrastructure.persistence.models.currency import Base

logger = logging.getLogger(__name__)


class Database:
    """Async engine and session factory backing the rate store."""

    def __init__(self, db_url: str, echo: bool = False):
        self.url = make_url(db_url)
        self.engine = create_async_engine(self.url, echo=echo)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_tables(self) -> None:
        database = self.url.database
        if self.url.get_backend_name() == 'sqlite' and database and database != ':memory:':
            Path(database).parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f'Rate store tables ready ({self.url.render_as_string(hide_password=True)})')

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self):
        """Yields a session committed on success and rolled back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
