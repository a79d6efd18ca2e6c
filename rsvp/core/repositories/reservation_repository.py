from __future__ import annotations

from abc import ABC, abstractmethod

from rsvp.schemas.models import Reservation, ReservationQuery

ReservationId = str


class Rsvp(ABC):
    """
    The reservation operations. Every method raises a `rsvp.core.errors.ReservationError`
    on failure.
    """

    @abstractmethod
    async def reserve(self, rsvp: Reservation) -> Reservation:
        """Persist a new reservation; returns it with the store-assigned id."""
        raise NotImplementedError

    @abstractmethod
    async def change_status(self, reservation_id: ReservationId) -> Reservation:
        """Confirm a pending reservation."""
        raise NotImplementedError

    @abstractmethod
    async def update_note(self, reservation_id: ReservationId, note: str) -> Reservation:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, reservation_id: ReservationId) -> Reservation:
        """Remove the reservation; returns its last state."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, reservation_id: ReservationId) -> Reservation:
        raise NotImplementedError

    @abstractmethod
    async def query(self, query: ReservationQuery) -> list[Reservation]:
        raise NotImplementedError
