from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

from sqlalchemy import bindparam, delete, insert, select, text, update
from sqlalchemy.dialects.postgresql import TSTZRANGE
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.expression import Executable

from rsvp.core.entities.conflict import Unparsed
from rsvp.core.errors import (
    ConflictingReservation,
    DbError,
    InvalidReservationId,
    InvalidTime,
    ReservationError,
)
from rsvp.core.repositories.reservation_repository import ReservationId, Rsvp
from rsvp.core.timespan import convert_to_timestamp, get_timespan
from rsvp.core.validators import validate
from rsvp.infrastructure.db_errors import from_db_error
from rsvp.infrastructure.models.models import ReservationModel, RsvpStatus
from rsvp.schemas.models import Reservation, ReservationQuery

logger = logging.getLogger(__name__)

reservations = ReservationModel.__table__

_QUERY = (
    text(
        "SELECT * FROM rsvp.query(:uid, :rid, :during, CAST(:status AS rsvp.reservation_status), "
        ":page, :is_desc, :page_size)"
    )
    .bindparams(bindparam("during", type_=TSTZRANGE))
    .columns(*reservations.c)
)


class ReservationManager(Rsvp):
    """
    Rsvp backed by PostgreSQL.

    Each call runs in its own session and transaction. Overlap prevention is left to the
    reservations_conflict exclusion constraint; a rejected insert surfaces as
    ConflictingReservation.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def reserve(self, rsvp: Reservation) -> Reservation:
        if rsvp.start is None or rsvp.end is None:
            raise InvalidTime()
        validate(rsvp)

        status = rsvp.get_status()
        stmt = (
            insert(reservations)
            .values(
                user_id=rsvp.user_id,
                resource_id=rsvp.resource_id,
                timespan=get_timespan(rsvp.start, rsvp.end),
                note=rsvp.note,
                status=RsvpStatus.from_wire(status),
            )
            .returning(reservations.c.id)
        )
        row = await self._fetch_one(stmt)

        reserved = rsvp.model_copy(update={"id": str(row["id"]), "status": status})
        logger.debug("Reserved %s for user %s as %s", reserved.resource_id, reserved.user_id, reserved.id)
        return reserved

    async def change_status(self, reservation_id: ReservationId) -> Reservation:
        # only pending -> confirmed; any other current status matches no row
        stmt = (
            update(reservations)
            .where(
                reservations.c.id == _parse_id(reservation_id),
                reservations.c.status == RsvpStatus.pending,
            )
            .values(status=RsvpStatus.confirmed)
            .returning(*reservations.c)
        )
        return _to_reservation(await self._fetch_one(stmt))

    async def update_note(self, reservation_id: ReservationId, note: str) -> Reservation:
        stmt = (
            update(reservations)
            .where(reservations.c.id == _parse_id(reservation_id))
            .values(note=note)
            .returning(*reservations.c)
        )
        return _to_reservation(await self._fetch_one(stmt))

    async def delete(self, reservation_id: ReservationId) -> Reservation:
        stmt = (
            delete(reservations)
            .where(reservations.c.id == _parse_id(reservation_id))
            .returning(*reservations.c)
        )
        return _to_reservation(await self._fetch_one(stmt))

    async def get(self, reservation_id: ReservationId) -> Reservation:
        stmt = select(reservations).where(reservations.c.id == _parse_id(reservation_id))
        return _to_reservation(await self._fetch_one(stmt))

    async def query(self, query: ReservationQuery) -> list[Reservation]:
        validate(query)

        params = {
            "uid": query.user_id or None,
            "rid": query.resource_id or None,
            "during": get_timespan(query.start, query.end),
            "status": RsvpStatus.from_wire(query.get_status()).value,
            "page": query.page,
            "is_desc": query.desc,
            "page_size": query.page_size,
        }
        rows = await self._fetch_all(_QUERY, params)
        return [_to_reservation(row) for row in rows]

    # -----------------------------
    # Internal helpers
    # -----------------------------
    async def _fetch_one(self, stmt: Executable) -> Mapping[str, Any]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return result.mappings().one()
        except SQLAlchemyError as e:
            raise _translate(e) from e

    async def _fetch_all(self, stmt: Executable, params: dict[str, Any]) -> list[Mapping[str, Any]]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt, params)
                    return list(result.mappings().all())
        except SQLAlchemyError as e:
            raise _translate(e) from e


def _parse_id(reservation_id: ReservationId) -> uuid.UUID:
    validate(reservation_id)
    try:
        return uuid.UUID(reservation_id)
    except ValueError:
        raise InvalidReservationId(reservation_id) from None


def _translate(error: SQLAlchemyError) -> ReservationError:
    translated = from_db_error(error)
    if isinstance(translated, ConflictingReservation):
        if isinstance(translated.info, Unparsed):
            logger.warning("Reservation conflict with unrecognized detail: %r", translated.info.raw)
        else:
            logger.info("Reservation conflict: %s", translated.info.conflict)
    elif isinstance(translated, DbError):
        logger.warning("Database error: %s", error)
    return translated


def _to_reservation(row: Mapping[str, Any]) -> Reservation:
    timespan = row["timespan"]
    return Reservation(
        id=str(row["id"]),
        user_id=row["user_id"],
        resource_id=row["resource_id"],
        start=convert_to_timestamp(timespan.lower),
        end=convert_to_timestamp(timespan.upper),
        note=row["note"] or "",
        status=RsvpStatus(row["status"]).to_wire(),
    )
