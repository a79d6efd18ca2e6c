from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.dialects.postgresql import Range

from rsvp.core.errors import InvalidTime
from rsvp.schemas.timestamp import Timestamp

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def convert_to_timestamp(dt: datetime) -> Timestamp:
    """Raises ValueError for naive datetimes; any offset is normalized to UTC."""
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError(f"datetime {dt.isoformat()} has no timezone")

    delta = dt.astimezone(timezone.utc) - EPOCH
    return Timestamp(
        seconds=delta.days * 86400 + delta.seconds,
        nanos=delta.microseconds * 1000,
    )


def convert_to_utc_time(ts: Timestamp) -> datetime:
    return EPOCH + timedelta(seconds=ts.seconds, microseconds=ts.nanos // 1000)


def validate_range(start: Timestamp | None, end: Timestamp | None) -> None:
    """
    Both ends must be present and start must be strictly before end.

    Ordering is compared on whole seconds only; the nanos remainder is ignored.
    """
    if start is None or end is None:
        raise InvalidTime()
    if start.seconds >= end.seconds:
        raise InvalidTime()


def get_timespan(start: Timestamp | None, end: Timestamp | None) -> Range[datetime]:
    """Half-open [start, end) range of UTC instants."""
    if start is None or end is None:
        raise InvalidTime()
    return Range(convert_to_utc_time(start), convert_to_utc_time(end), bounds="[)")
