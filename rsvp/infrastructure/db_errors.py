from __future__ import annotations

from sqlalchemy.exc import DBAPIError, NoResultFound

from rsvp.core.entities.conflict import parse_conflict_info
from rsvp.core.errors import ConflictingReservation, DbError, NotFound, ReservationError
from rsvp.infrastructure.models.models import SCHEMA, TABLE

EXCLUSION_VIOLATION = "23P01"


def _is_reservation_conflict(error: DBAPIError) -> bool:
    orig = error.orig
    diag = getattr(orig, "diag", None)
    if diag is None:
        return False
    return (
        getattr(orig, "sqlstate", None) == EXCLUSION_VIOLATION
        and diag.schema_name == SCHEMA
        and diag.table_name == TABLE
    )


def from_db_error(error: Exception) -> ReservationError:
    """
    Translate a SQLAlchemy / psycopg failure into a ReservationError.

      - no row returned                            -> NotFound
      - exclusion violation on rsvp.reservations   -> ConflictingReservation
      - anything else                              -> DbError
    """
    if isinstance(error, NoResultFound):
        return NotFound()

    if isinstance(error, DBAPIError) and _is_reservation_conflict(error):
        detail = error.orig.diag.message_detail or ""
        return ConflictingReservation(parse_conflict_info(detail))

    return DbError(error)
