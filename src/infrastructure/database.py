"""Async SQLAlchemy engine, session factory, and FastAPI dependency.

The engine carries a server-side statement_timeout so a runaway query
surfaces as SQLSTATE 57014, which errors.classify_database_error maps to
DATABASE_TIMEOUT.  Pool checkout waits are bounded by db_pool_timeout.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from .config import Settings, settings


def build_engine(config: Settings) -> AsyncEngine:
    connect_args = {}
    if config.database_url.startswith("postgresql+asyncpg"):
        connect_args["server_settings"] = {
            "statement_timeout": str(config.db_statement_timeout_ms),
            "application_name": "portfolio-planner",
        }
    return create_async_engine(
        config.database_url,
        echo=config.debug,
        pool_pre_ping=True,
        pool_size=config.db_pool_size,
        pool_timeout=config.db_pool_timeout,
        connect_args=connect_args,
    )


engine = build_engine(settings)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for the planner's ORM tables."""


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; commits when the handler returns, rolls back if it raises."""
    async with AsyncSessionLocal() as session:
        async with session.begin():
            yield session


__all__ = [
    "AsyncSessionLocal",
    "Base",
    "Settings",
    "build_engine",
    "engine",
    "get_session",
    "settings",
]
