from __future__ import annotations

from typing import Any

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import settings


class Base(DeclarativeBase):
    pass


def build_engine(url: str | URL, **kwargs: Any) -> AsyncEngine:
    """
    Async engine over psycopg. Sessions run in UTC so range literals in error details
    come back with a +00 offset.
    """
    connect_args = dict(kwargs.pop("connect_args", {}))
    connect_args.setdefault("options", "-c timezone=UTC")
    return create_async_engine(url, connect_args=connect_args, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


engine = build_engine(
    settings.url,
    echo=settings.db_echo,
    pool_size=settings.db_max_connections,
    max_overflow=0,
)
AsyncSessionLocal = build_session_factory(engine)
