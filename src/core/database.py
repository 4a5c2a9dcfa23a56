from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, func
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.core.config import settings


def engine_options(url: str) -> dict[str, Any]:
    """Pool settings for server databases; SQLite (tests, local runs) keeps the driver defaults."""
    options: dict[str, Any] = {"echo": settings.DATABASE_ECHO}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(pool_size=settings.DATABASE_POOL_SIZE, pool_pre_ping=True)
    return options


engine: AsyncEngine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

AsyncSessionLocal: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Drivers such as asyncpg raise raw OSError (e.g. ConnectionRefusedError) when the server is unreachable.
STORAGE_ERRORS: tuple[type[Exception], ...] = (SQLAlchemyError, OSError)


class Base(DeclarativeBase):
    """Declarative base. Every table carries creation and update timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create missing tables. Development convenience; production runs migrations."""
    # Model modules register themselves on Base.metadata when imported.
    import src.modules.moderation.models  # noqa: F401
    import src.modules.reports.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
