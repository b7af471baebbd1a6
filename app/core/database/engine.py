"""
Database engine configuration and session management.

Current: SQLite (async with aiosqlite)
Production: PostgreSQL (switch to asyncpg by changing DATABASE_URL only)
"""
from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.core import config

engine = create_async_engine(
    config.SQLALCHEMY_DATABASE_URL,
    # NullPool for SQLite to avoid connection pool issues
    poolclass=NullPool if config.SQLALCHEMY_DATABASE_URL.startswith("sqlite") else None,
    echo=False,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    Usage in FastAPI routes:
        @router.get("/catalogs/{catalog_type}")
        async def list_catalogs(db: AsyncSession = Depends(get_db)):
            ...
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


async def init_db(bind=None):
    """
    Create all tables that are not there yet.

    Call this on application startup; tests pass their own engine as ``bind``.
    """
    from app.core.database.base import Base

    # Import all models to ensure they're registered with SQLAlchemy
    from app.features.permissions.models import RolePermission, AuditLog  # noqa: F401
    from app.features.catalogs.models import CatalogItem  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
