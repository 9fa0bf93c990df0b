"""
Daylog Backend — Database Session Management
==============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   One pooled async engine per process; one session (one transaction)
       per request, committed when the handler succeeds and rolled back
       when anything raises.
Who:   Route handlers and the identity dependency receive the session via
       FastAPI's Depends(); services receive it as an explicit argument.

Concurrency note:
    The database is the only shared mutable resource. Row locks taken by a
    service (e.g. habit check-in) and ON CONFLICT upserts are held until the
    request transaction commits in get_db_session().
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
    pool_recycle=3600,
    # SQL echo only at DEBUG; it is very noisy otherwise
    echo=settings.log_level == "DEBUG",
)

# expire_on_commit=False: response schemas are built from ORM objects after
# the handler returns, when the session has already committed
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Shares one metadata object so Alembic sees users, notes, habits and
    diaries together.
    """
    pass


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the identity dependency and the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/habits")
        async def list_habits(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Closes all pooled connections; called from the lifespan shutdown."""
    await engine.dispose()
