"""
Database configuration and session management
SQLAlchemy async ORM over MySQL (aiomysql driver)
"""
import os
import logging
from dotenv import load_dotenv

from sqlalchemy import text  # type: ignore
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # type: ignore
from sqlalchemy.orm import declarative_base  # type: ignore

load_dotenv()

# Database Configuration
MYSQL_HOST = os.getenv("MYSQL_HOST", "localhost")
MYSQL_PORT = int(os.getenv("MYSQL_PORT", 3306))
MYSQL_USER = os.getenv("MYSQL_USER", "root")
MYSQL_PASSWORD = os.getenv("MYSQL_PASSWORD", "")
MYSQL_DATABASE = os.getenv("MYSQL_DATABASE", "calendar_db")
MYSQL_CHARSET = os.getenv("MYSQL_CHARSET", "utf8mb4")

logger = logging.getLogger(__name__)

# DATABASE_URL wins when set (e.g. sqlite+aiosqlite for local runs)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+aiomysql://{MYSQL_USER}:{MYSQL_PASSWORD}@{MYSQL_HOST}:{MYSQL_PORT}/{MYSQL_DATABASE}?charset={MYSQL_CHARSET}",
)

_engine_kwargs = {"echo": False, "pool_pre_ping": True}
if DATABASE_URL.startswith("mysql"):
    _engine_kwargs.update(pool_size=10, max_overflow=20)

# Create async engine
engine = create_async_engine(DATABASE_URL, **_engine_kwargs)

# Create async session factory.
# Every session is its own unit of work: holiday sync opens a fresh one
# instead of borrowing the request session.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for SQLAlchemy models
Base = declarative_base()


# SQLAlchemy dependency for FastAPI
async def get_db() -> AsyncSession:
    """
    Get SQLAlchemy database session (FastAPI dependency).
    Use this in your route handlers.

    Example:
        @router.get("/holidays")
        async def list_holidays(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Holiday))
            return result.scalars().all()
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


async def ensure_database_exists():
    """
    Create the application database if it does not exist (MySQL only).
    Connects to the 'mysql' system database and runs CREATE DATABASE IF NOT EXISTS.
    Call this before init_db() on a fresh server.
    """
    if not DATABASE_URL.startswith("mysql"):
        return
    url_no_db = f"mysql+aiomysql://{MYSQL_USER}:{MYSQL_PASSWORD}@{MYSQL_HOST}:{MYSQL_PORT}/mysql?charset={MYSQL_CHARSET}"
    temp_engine = create_async_engine(url_no_db, pool_pre_ping=True)
    escaped = MYSQL_DATABASE.replace("`", "``")
    async with temp_engine.begin() as conn:
        await conn.execute(
            text("CREATE DATABASE IF NOT EXISTS `{:s}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci".format(escaped))
        )
    await temp_engine.dispose()
    logger.info(f"Database {MYSQL_DATABASE} ensured (created if missing).")


async def init_db():
    """
    Initialize database - create all tables using SQLAlchemy models.
    This is called on application startup.
    """
    # Register models on Base.metadata
    import calendar_backend.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database initialized: {MYSQL_DATABASE}")


async def close_db():
    """Close database connections"""
    await engine.dispose()
    logger.info("Database connections closed")
