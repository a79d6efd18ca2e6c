from __future__ import annotations

from datetime import datetime
from enum import IntEnum

from pydantic import BaseModel

from rsvp.core.timespan import convert_to_timestamp
from rsvp.schemas.timestamp import Timestamp


class ReservationStatus(IntEnum):
    Unknown = 0
    Pending = 1
    Confirmed = 2
    Blocked = 3


def _status_or_default(value: int, default: ReservationStatus) -> ReservationStatus:
    try:
        status = ReservationStatus(value)
    except ValueError:
        return default
    return default if status is ReservationStatus.Unknown else status


class Reservation(BaseModel):
    id: str = ""
    user_id: str = ""
    resource_id: str = ""
    start: Timestamp | None = None
    end: Timestamp | None = None
    note: str = ""
    # raw enum value, as it arrives on the wire; may be out of range
    status: int = ReservationStatus.Unknown

    @classmethod
    def new_pending(
        cls,
        user_id: str,
        resource_id: str,
        start: datetime,
        end: datetime,
        note: str = "",
    ) -> Reservation:
        return cls(
            user_id=user_id,
            resource_id=resource_id,
            start=convert_to_timestamp(start),
            end=convert_to_timestamp(end),
            note=note,
            status=ReservationStatus.Pending,
        )

    def get_status(self) -> ReservationStatus:
        """Unknown or unrecognized status values read as Pending."""
        return _status_or_default(self.status, ReservationStatus.Pending)


class ReservationQuery(BaseModel):
    # empty user_id / resource_id mean "any"
    user_id: str = ""
    resource_id: str = ""
    start: Timestamp | None = None
    end: Timestamp | None = None
    status: int = ReservationStatus.Unknown
    page: int = 1
    page_size: int = 10
    desc: bool = False

    @classmethod
    def new(
        cls,
        user_id: str,
        resource_id: str,
        start: datetime,
        end: datetime,
        status: ReservationStatus = ReservationStatus.Pending,
        page: int = 1,
        page_size: int = 10,
        desc: bool = False,
    ) -> ReservationQuery:
        return cls(
            user_id=user_id,
            resource_id=resource_id,
            start=convert_to_timestamp(start),
            end=convert_to_timestamp(end),
            status=status,
            page=page,
            page_size=page_size,
            desc=desc,
        )

    def get_status(self) -> ReservationStatus:
        return _status_or_default(self.status, ReservationStatus.Pending)
