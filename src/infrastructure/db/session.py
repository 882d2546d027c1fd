from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable
from typing import TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from src.core.config import get_settings
from src.core.errors import DependencyFailure

T = TypeVar("T")

logger = structlog.get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _get_engine() -> AsyncEngine:
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.async_database_url,
            echo=False,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            _get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    session_factory = get_session_factory()
    async with session_factory() as session:
        yield session


async def bounded(awaitable: Awaitable[T], *, operation: str) -> T:
    """Await a storage call under the configured query timeout.

    Timeouts and driver errors surface as ``DependencyFailure`` so a slow or
    broken database never hangs a request or leaks driver details.
    """
    timeout = get_settings().query_timeout_seconds
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except TimeoutError as exc:
        await logger.aerror("storage_timeout", operation=operation, timeout_seconds=timeout)
        raise DependencyFailure("Database query timed out") from exc
    except SQLAlchemyError as exc:
        await logger.aerror("storage_failure", operation=operation, error=str(exc))
        raise DependencyFailure() from exc
