from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nutriplan.config import settings

_raw_url = settings.database_url

if _raw_url.startswith("postgres://"):
    _raw_url = _raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
elif _raw_url.startswith("postgresql://"):
    _raw_url = _raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)

engine = create_async_engine(_raw_url, pool_pre_ping=True)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

CLIENT_STATE_DDL = (
    "CREATE TABLE IF NOT EXISTS client_state ("
    "sid VARCHAR(64) NOT NULL, "
    "key VARCHAR(64) NOT NULL, "
    "value TEXT NOT NULL, "
    "updated_at TIMESTAMP WITH TIME ZONE NOT NULL, "
    "PRIMARY KEY (sid, key))"
)


async def get_session() -> AsyncSession:  # type: ignore[misc]
    async with async_session() as session:
        yield session


async def init_schema() -> None:
    async with engine.begin() as conn:
        await conn.execute(text(CLIENT_STATE_DDL))
