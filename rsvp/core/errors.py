from __future__ import annotations

from typing import Any

from rsvp.core.entities.conflict import ReservationConflictInfo


class ReservationError(Exception):
    """
    Base of the closed set of errors raised by reservation operations.

    Two errors are equal when they are of the same kind and carry equal payloads.
    """
    message = "unknown data store error"

    def __str__(self) -> str:
        return self.message.format(*self.args)

    def _payload(self) -> tuple[Any, ...]:
        return self.args

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._payload() == other._payload()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._payload()))


class DbError(ReservationError):
    """Opaque wrapper around any store failure that has no dedicated kind."""
    message = "Database error"

    def __init__(self, source: BaseException) -> None:
        super().__init__(source)
        self.source = source

    def _payload(self) -> tuple[Any, ...]:
        # never compared by content
        return ()


class InvalidReservationId(ReservationError):
    message = "Invalid reservation id: {}"

    def __init__(self, reservation_id: str) -> None:
        super().__init__(reservation_id)
        self.reservation_id = reservation_id


class InvalidResourceId(ReservationError):
    message = "Invalid resource id: {}"

    def __init__(self, resource_id: str) -> None:
        super().__init__(resource_id)
        self.resource_id = resource_id


class InvalidUserId(ReservationError):
    message = "Invalid user id: {}"

    def __init__(self, user_id: str) -> None:
        super().__init__(user_id)
        self.user_id = user_id


class InvalidTime(ReservationError):
    message = "Invalid start or end time for the reservation"


class ConflictingReservation(ReservationError):
    message = "Conflicting reservation"

    def __init__(self, info: ReservationConflictInfo) -> None:
        super().__init__(info)
        self.info = info


class NotFound(ReservationError):
    message = "No reservation found by the given condition"


class Unknown(ReservationError):
    message = "unknown data store error"
