"""
Database connection with SQLAlchemy ORM
"""

import asyncio
from typing import Optional, AsyncGenerator
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine

from src.infra.config.settings import get_settings
from src.infra.models import Base
from src.core.exceptions.base import StoreError
from src.core.logger.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()


class DatabaseManager:
    """SQLAlchemy async database manager. One instance lives for the life of the app."""

    def __init__(self, database_url: Optional[str] = None):
        self._database_url = database_url or self._build_database_url()
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None
        self._connect_lock = asyncio.Lock()

    @staticmethod
    def _build_database_url() -> str:
        """Build connection URL from DB_HOST, DB_PORT and DB_NAME"""
        if settings.DATABASE_URL:
            return settings.DATABASE_URL
        return (
            f"{settings.DB_DRIVER}://{settings.DB_USER}:{settings.DB_PASSWORD}"
            f"@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"
        )

    @property
    def is_connected(self) -> bool:
        return self._session_factory is not None

    async def connect(self) -> AsyncEngine:
        """Initialize database engine and session factory, creating the users table if missing"""
        if self._engine is not None:
            return self._engine

        # Concurrent callers share the first engine
        async with self._connect_lock:
            if self._engine is not None:
                return self._engine

            engine_options = {"echo": settings.DB_LOGGING_ENABLED, "pool_pre_ping": True}
            if not self._database_url.startswith("sqlite"):
                engine_options.update(
                    pool_size=settings.DB_MIN_POOL_SIZE,
                    max_overflow=settings.DB_MAX_POOL_SIZE - settings.DB_MIN_POOL_SIZE,
                    pool_recycle=3600
                )

            engine = create_async_engine(self._database_url, **engine_options)
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            except Exception as e:
                await engine.dispose()
                logger.error(
                    "Failed to connect to database",
                    extra={
                        "host": settings.DB_HOST,
                        "port": settings.DB_PORT,
                        "database": settings.DB_NAME,
                        "error": str(e)
                    }
                )
                raise

            self._engine = engine
            self._session_factory = async_sessionmaker(
                self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False
            )

            logger.info(
                "Database connection successful",
                extra={"dialect": self._engine.dialect.name, "database": self._engine.url.database}
            )
            return self._engine

    async def close(self):
        """Close database engine"""
        if self._engine is not None:
            try:
                await self._engine.dispose()
                logger.info("Database engine closed")
            except Exception as e:
                logger.error(f"Error closing database engine: {e}")
            finally:
                self._engine = None
                self._session_factory = None

    async def ping(self) -> bool:
        """Run a trivial query; False when the database is unreachable"""
        try:
            await self.connect()
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    def get_session_factory(self) -> Optional[async_sessionmaker]:
        """Get the session factory"""
        return self._session_factory


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database session
    Use with FastAPI Depends(); the manager is the one created by the app factory
    """
    db_manager: DatabaseManager = request.app.state.db

    if not db_manager.is_connected:
        try:
            await db_manager.connect()
        except Exception as e:
            raise StoreError("Database unavailable") from e

    session_factory = db_manager.get_session_factory()
    async with session_factory() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.debug(f"Session rolled back: {type(e).__name__}")
            raise
