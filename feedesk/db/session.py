from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from feedesk.core.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    """PostgreSQL (asyncpg) in deployment; sqlite+aiosqlite for local demo runs and tests."""
    if database_url.startswith("sqlite"):
        # one shared connection so an in-memory database survives across sessions
        return create_async_engine(
            database_url,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    # pool_pre_ping: drop connections the server closed while idle.
    # pool_recycle: seconds before a pooled connection is replaced.
    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=300,
    )


engine = build_engine(settings.database_url)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session. Services commit explicitly; anything left open is rolled back on close."""
    async with AsyncSessionLocal() as session:
        yield session
