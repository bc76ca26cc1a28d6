"""Async SQLAlchemy engine and session factory.

With DATABASE_URL set, the service talks to PostgreSQL through asyncpg and
every request gets its own session (and therefore its own transaction, so
the row locks taken by the repos last until the request finishes).

Without DATABASE_URL, ``engine`` and ``async_session_factory`` are None and
the in-memory store is used instead.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for every table in app/db/tables.py."""


if SETTINGS.database_url:
    engine = create_async_engine(
        SETTINGS.database_url,
        echo=SETTINGS.is_dev,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )
    async_session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
else:
    engine = None
    async_session_factory = None


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """One unit of work: commit on success, roll back on error."""
    if async_session_factory is None:
        raise RuntimeError("DATABASE_URL is not configured")
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping() -> bool:
    """True when the database answers ``SELECT 1``."""
    if engine is None:
        return False
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True


async def insert_unique(session: AsyncSession, row: object, conflict: str) -> None:
    """Insert ``row`` inside a savepoint, turning a unique violation into ValueError.

    Repos promise ValueError on duplicates. Letting the database constraint
    decide closes the window a SELECT-then-INSERT leaves open between two
    concurrent requests, and the savepoint keeps the outer transaction usable
    so the caller can read the row that won.
    """
    try:
        async with session.begin_nested():
            session.add(row)
            await session.flush()
    except IntegrityError:
        raise ValueError(conflict) from None


@asynccontextmanager
async def lifespan_db() -> AsyncIterator[None]:
    if engine is None:
        logger.info("No DATABASE_URL configured, using in-memory store")
        yield
        return

    logger.info("Database engine created: %s", engine.url.render_as_string())
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Database engine disposed")
