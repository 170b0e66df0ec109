"""
Database connection and session management.
Engine, session factory and the declarative base shared by every model.
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import text, DateTime, Uuid
from app.config import settings
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Timezone-aware current time used for record timestamps."""
    return datetime.now(timezone.utc)


def build_engine_options(database_url: str, echo: bool = False) -> Dict[str, Any]:
    """
    Engine keyword arguments for the given database URL.
    Pool tuning only applies to server databases; SQLite uses its own pool.
    """
    options: Dict[str, Any] = {"echo": echo}
    if database_url.startswith("postgresql"):
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,  # Validate connections before use
            pool_recycle=3600,
            pool_timeout=30,
            connect_args={
                "server_settings": {
                    "application_name": "estate_listing_api",
                }
            },
        )
    return options


engine = create_async_engine(
    settings.database_url,
    **build_engine_options(settings.database_url, echo=settings.debug)
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Declarative base. Every table gets a UUID key and creation and update times.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session; rolled back if the handler raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_session_factory() -> async_sessionmaker:
    """
    Dependency returning the session factory.
    Used by handlers that issue several independent queries concurrently,
    each on its own session.
    """
    return AsyncSessionLocal


async def check_database_connection() -> bool:
    """Round trip a trivial query; False when the database is unreachable."""
    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            logger.info("Database connection successful")
            return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


async def create_tables():
    """Create every mapped table that does not exist yet."""
    # Register every mapped table on the metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")


async def drop_tables():
    """Drop every mapped table. Refused in production."""
    if settings.is_production:
        raise RuntimeError("Cannot drop tables in production environment")

    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped successfully")


async def close_db_connection():
    """Dispose of the engine pool."""
    await engine.dispose()
    logger.info("Database connections closed")
