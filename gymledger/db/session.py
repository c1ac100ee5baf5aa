from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from gymledger.core.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool options per backend. SQLite (local runs, tests) has no server-side idle timeout."""
    if database_url.startswith("sqlite"):
        return {"echo": False, "future": True}
    # pool_pre_ping: check connection is alive before use.
    # pool_recycle: discard connections after this many seconds to avoid stale connections.
    return {"echo": False, "future": True, "pool_pre_ping": True, "pool_recycle": 300}


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session
