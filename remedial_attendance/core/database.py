from typing import AsyncGenerator, Any, Dict
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from remedial_attendance.core.config import settings
from remedial_attendance.models import Base


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine; pool tuning applies to server databases only."""
    options: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(
            pool_size=20,              # Maximum number of connections in the pool
            max_overflow=10,           # Connections allowed beyond pool_size
            pool_timeout=30,           # Seconds to wait on pool checkout
            pool_recycle=1800,         # Recycle connections after 30 minutes
        )
    return create_async_engine(url, **options)


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,    # Don't expire objects after commit
    autoflush=False            # Explicit flush management
)


# FastAPI dependency for database sessions
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async database session.
    Usage: db: AsyncSession = Depends(get_db)
    """
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception:
        # Rollback on error
        await session.rollback()
        raise
    finally:
        # Always close the session
        await session.close()


# Context manager for background tasks and scripts
@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions outside of request context.
    Usage: async with get_db_context() as session:
    """
    session = AsyncSessionLocal()
    try:
        yield session
        # Commit by default when used as context manager
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


# Database initialization functions
async def init_db() -> None:
    """Initialize database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
