"""
AcadCentral Department Portal
Mirror database connection and session management
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import get_settings
from ..exceptions import DatabaseConnectionException
from ..utils.helpers import utc_now_iso
from .migrations import apply_schema_migrations, import_legacy_json
from .schema import ensure_all_schemas

# Configure logging
logger = logging.getLogger(__name__)

# Global variables
async_engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[async_sessionmaker] = None


def get_async_database_url(database_url: str) -> str:
    """Convert sync database URL to async version"""
    if database_url.startswith("mysql://") or database_url.startswith("mysql+pymysql://"):
        return "mysql+aiomysql://" + database_url.split("://", 1)[1]
    elif database_url.startswith("mariadb://"):
        return "mysql+aiomysql://" + database_url.split("://", 1)[1]
    elif database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def create_async_engine_instance(database_url: str) -> AsyncEngine:
    """Create asynchronous SQLAlchemy engine"""
    settings = get_settings()

    engine_kwargs = {
        "echo": settings.DB_ECHO,
    }

    if database_url.startswith("sqlite"):
        # SQLite specific configuration
        engine_kwargs.update({
            "connect_args": {
                "check_same_thread": False,
                "timeout": 20
            }
        })
    else:
        # MariaDB / MySQL specific configuration
        engine_kwargs.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": 30,
            "pool_recycle": 3600,
            "pool_pre_ping": True
        })

    return create_async_engine(database_url, **engine_kwargs)


async def create_database_if_missing(database_url: str) -> None:
    """CREATE DATABASE IF NOT EXISTS for server databases; SQLite creates its file itself"""
    url = make_url(database_url)
    if url.get_backend_name() not in ("mysql", "mariadb") or not url.database:
        return

    server_engine = create_async_engine(url._replace(database=None), pool_pre_ping=True)
    try:
        async with server_engine.begin() as conn:
            await conn.execute(text(
                f"CREATE DATABASE IF NOT EXISTS `{url.database}` "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            ))
        logger.info(f"✅ Database '{url.database}' ready")
    finally:
        await server_engine.dispose()


async def init_database(
    database_url: Optional[str] = None,
    legacy_json_path: Optional[str] = None
) -> AsyncEngine:
    """
    Initialize the mirror: engine, tables, schema migrations and the
    one-time legacy JSON import. Any failure here is fatal for startup.
    """
    global async_engine, AsyncSessionLocal

    settings = get_settings()
    database_url = get_async_database_url(database_url or settings.database_url)
    if legacy_json_path is None:
        legacy_json_path = settings.LEGACY_JSON_PATH

    logger.info("Initializing mirror database connection...")

    try:
        await create_database_if_missing(database_url)

        async_engine = create_async_engine_instance(database_url)
        AsyncSessionLocal = async_sessionmaker(
            bind=async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=True
        )

        await test_async_connection()

        async with async_engine.begin() as conn:
            await ensure_all_schemas(conn)
            await apply_schema_migrations(conn)

        if legacy_json_path:
            async with get_async_session() as session:
                await import_legacy_json(session, legacy_json_path)

        logger.info("✅ Database initialized successfully")
        return async_engine

    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        await close_database_connections()
        raise DatabaseConnectionException(f"Database initialization failed: {e}") from e


async def test_async_connection():
    """Test async database connection"""
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("✅ Async database connection successful")
    except Exception as e:
        logger.error(f"❌ Async database connection failed: {e}")
        raise


# Session management functions
@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session with automatic cleanup"""
    if not AsyncSessionLocal:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Dependency for FastAPI
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions"""
    async with get_async_session() as session:
        yield session


def get_dialect_name() -> Optional[str]:
    return async_engine.dialect.name if async_engine else None


# Health check functions
async def check_database_health() -> dict:
    """Check database connection health"""
    try:
        async with get_async_session() as session:
            result = await session.execute(text("SELECT 1 as health_check"))
            row = result.fetchone()

            if row and row[0] == 1:
                return {
                    "status": "healthy",
                    "database": "connected",
                    "timestamp": utc_now_iso()
                }
            else:
                return {
                    "status": "unhealthy",
                    "database": "query_failed",
                    "timestamp": utc_now_iso()
                }

    except Exception as e:
        return {
            "status": "unhealthy",
            "database": "connection_failed",
            "error": str(e),
            "timestamp": utc_now_iso()
        }


# Cleanup functions
async def close_database_connections():
    """Close all database connections"""
    global async_engine, AsyncSessionLocal

    try:
        if async_engine:
            await async_engine.dispose()
            logger.info("✅ Async database engine disposed")
    except Exception as e:
        logger.error(f"❌ Error closing database connections: {e}")
    finally:
        async_engine = None
        AsyncSessionLocal = None


# Export main functions
__all__ = [
    "init_database",
    "get_async_session",
    "get_db",
    "get_dialect_name",
    "check_database_health",
    "close_database_connections",
]
