"""Async engine and session factory for the account store."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from greenpact.core.config import get_settings

SessionFactory = async_sessionmaker[AsyncSession]


def build_session_factory(database_url: str) -> tuple[AsyncEngine, SessionFactory]:
    """Create an engine for ``database_url`` and a session factory bound to it.

    Sessions do not expire objects on commit: handlers keep returning the
    user they just wrote after committing.
    """

    engine = create_async_engine(database_url, echo=False)
    return engine, async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


engine, async_session_factory = build_session_factory(get_settings().database_url)


@asynccontextmanager
async def get_session(factory: SessionFactory | None = None) -> AsyncIterator[AsyncSession]:
    """Open a session from ``factory``, or from the application's own."""

    async with (factory or async_session_factory)() as session:
        yield session
