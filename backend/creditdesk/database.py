"""
CreditDesk Database Configuration
Async SQLAlchemy engine and session management.
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from creditdesk.config import settings

_engine_options = {
    "echo": settings.debug,
    "future": True,
    "pool_pre_ping": True,    # Check connection health before use
}
if not settings.database_url.startswith("sqlite"):
    _engine_options.update(
        pool_size=20,
        max_overflow=40,
        pool_recycle=3600,    # Recycle connections every hour
    )

# Create async engine
engine = create_async_engine(settings.database_url, **_engine_options)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for all models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """
    Dependency that provides a database session.
    Use with FastAPI's Depends().

    The request runs as one unit of work: everything is committed when the
    handler returns and rolled back if it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """
    Initialize database tables.
    For development/testing only - use Alembic migrations in production.
    """
    # Import models so they are registered on Base.metadata
    import creditdesk.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Close database connections."""
    await engine.dispose()
