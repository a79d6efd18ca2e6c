from __future__ import annotations

from functools import singledispatch

from rsvp.core.errors import (
    InvalidReservationId,
    InvalidResourceId,
    InvalidTime,
    InvalidUserId,
    ReservationError,
)
from rsvp.core.timespan import validate_range
from rsvp.schemas.models import Reservation, ReservationQuery


def validate_id(value: str, error: type[ReservationError] = InvalidReservationId) -> None:
    """Raise `error(value)` when the identifier is empty."""
    if not value:
        raise error(value)


@singledispatch
def validate(value: object) -> None:
    """Check that `value` is well formed; raises a ReservationError otherwise."""
    raise TypeError(f"no validator for {type(value).__name__}")


@validate.register
def _(value: str) -> None:
    validate_id(value, InvalidReservationId)


@validate.register
def _(value: Reservation) -> None:
    # user_id first, then resource_id, then the window
    validate_id(value.user_id, InvalidUserId)
    validate_id(value.resource_id, InvalidResourceId)
    if value.start is None or value.end is None:
        raise InvalidTime()
    validate_range(value.start, value.end)


@validate.register
def _(value: ReservationQuery) -> None:
    # user_id / resource_id are optional filters on a query
    validate_range(value.start, value.end)
