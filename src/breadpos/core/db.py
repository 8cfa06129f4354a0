"""Async engine, session factory and FastAPI session dependencies."""

import os
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

LOCAL_DATABASE_URL = "postgresql+asyncpg://breadpos:dev_password_change_in_prod@db:5432/breadpos_dev"


def normalize_database_url(url: str) -> str:
    """Point plain Postgres URLs (as handed out by hosting providers) at asyncpg."""
    if not url:
        return LOCAL_DATABASE_URL
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return "postgresql+asyncpg://" + url[len(scheme):]
    return url


DATABASE_URL = normalize_database_url(os.getenv("DATABASE_URL", ""))

# Drops connections the register kept idle overnight instead of failing the first sale
engine = create_async_engine(DATABASE_URL, pool_pre_ping=True)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; commits when the endpoint returns, rolls back if it raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory for background work (stock and material deductions) that runs after the response."""
    return AsyncSessionLocal
