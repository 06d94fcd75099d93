from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.settings import settings as s
from app.utils.logging_config import logger

_engine_options: dict = {"pool_pre_ping": True, "echo": s.DEBUG}
if s.DATABASE_URL.startswith("postgresql"):
    _engine_options.update(pool_recycle=3600, pool_size=20, max_overflow=20)

engine = create_async_engine(s.DATABASE_URL, **_engine_options)

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency to get a DB session. Rolls back on database errors.
    """
    async with SessionLocal() as session:
        try:
            yield session
        except SQLAlchemyError:
            await session.rollback()
            raise


async def check_db_connection():
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
            logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        raise
