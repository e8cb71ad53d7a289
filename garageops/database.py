"""
Database engine, session factory and declarative base.
"""
import logging
from datetime import datetime, timezone
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from garageops.config import get_settings
from garageops.exceptions import PersistenceError

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_async_engine(settings.database_url, echo=settings.database_echo)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base for all models."""


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a database session for the duration of one request."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db():
    """Create all tables."""
    # Models must be imported so their tables are registered on Base.metadata
    import garageops.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def commit_or_raise(db: AsyncSession, message: str):
    """
    Commit the session, converting driver failures into PersistenceError.

    The session is rolled back before the error propagates so nothing from the
    failed unit of work stays visible to later statements.
    """
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception(message)
        raise PersistenceError(message, details=str(getattr(exc, "orig", None) or exc)) from exc


def enum_values(enum_cls) -> list[str]:
    """Persist enum members by value so stored spellings match the API."""
    return [member.value for member in enum_cls]


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)
