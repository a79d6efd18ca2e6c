from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from rsvp.infrastructure.database import AsyncSessionLocal, Base
from rsvp.infrastructure.models.models import SCHEMA
from rsvp.infrastructure.repositories.reservation_manager_impl import ReservationManager

logger = logging.getLogger(__name__)


def get_reservation_manager(
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
) -> ReservationManager:
    """Manager bound to the configured database, or to `session_factory` when given."""
    return ReservationManager(session_factory)


async def create_schema(engine: AsyncEngine) -> None:
    """
    Create the btree_gist extension, the rsvp schema, its enum, table, exclusion constraint
    and query function. Meant for development and test databases.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Created schema %s", SCHEMA)


async def drop_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.execute(text(f"DROP SCHEMA IF EXISTS {SCHEMA} CASCADE"))
    logger.info("Dropped schema %s", SCHEMA)
