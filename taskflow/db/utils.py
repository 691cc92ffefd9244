from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from taskflow.db.meta import meta
from taskflow.db.models import load_all_models
from taskflow.settings import settings


def create_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    return create_async_engine(
        url or str(settings.db_url),
        echo=settings.db_echo,
        **kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table on the shared metadata (dev and test bootstrap)."""
    load_all_models()
    async with engine.begin() as connection:
        await connection.run_sync(meta.create_all)
