"""
Structured view of the exclusion-constraint violation reported by PostgreSQL.

When an insert collides with a committed reservation, PostgreSQL puts a detail line like
this one on the error::

    Key (resource_id, timespan)=(ocean-view-room-777, ["2022-12-26 22:00:00+00","2022-12-30 19:00:00+00"))
    conflicts with existing key (resource_id, timespan)=(ocean-view-room-777,
    ["2022-12-25 22:00:00+00","2022-12-28 19:00:00+00")).

The first key clause is the rejected row, the second one is the row it collided with.
The text is not a stable interface, so `parse_conflict_info` never raises: whatever it
cannot decode is kept verbatim as `Unparsed`.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Mapping, Union

logger = logging.getLogger(__name__)

# (k1, k2)=(v1, [v2   where v2 runs up to the closing bracket/paren of the range literal
_KEY_CLAUSE_RE = re.compile(
    r"\((?P<k1>[a-zA-Z0-9_-]+)\s*,\s*(?P<k2>[a-zA-Z0-9_-]+)\)"
    r"=\((?P<v1>[a-zA-Z0-9_-]+)\s*,\s*\[(?P<v2>[^\)\]]+)"
)

# YYYY-MM-DD HH:MM:SS±HH, the tstzrange output format with an hour-only offset
_DATETIME_RE = re.compile(
    r"(?P<local>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})(?P<offset>[+-]\d{2})"
)
_LOCAL_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True, slots=True)
class ReservationWindow:
    resource_id: str
    start: datetime
    end: datetime

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> ReservationWindow:
        resource_id = values.get("resource_id")
        timespan = values.get("timespan")
        if resource_id is None or timespan is None:
            raise ValueError(f"key clause lacks resource_id or timespan: {dict(values)!r}")

        lower, sep, upper = timespan.replace('"', "").partition(",")
        if not sep:
            raise ValueError(f"timespan {timespan!r} has no upper bound")

        return cls(resource_id=resource_id, start=parse_datetime(lower), end=parse_datetime(upper))


@dataclass(frozen=True, slots=True)
class ReservationConflict:
    new: ReservationWindow
    old: ReservationWindow


@dataclass(frozen=True, slots=True)
class Parsed:
    conflict: ReservationConflict


@dataclass(frozen=True, slots=True)
class Unparsed:
    raw: str


ReservationConflictInfo = Union[Parsed, Unparsed]


def parse_datetime(value: str) -> datetime:
    """Parse `YYYY-MM-DD HH:MM:SS±HH` into an aware UTC datetime."""
    match = _DATETIME_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"{value!r} is not in YYYY-MM-DD HH:MM:SS±HH format")

    local = datetime.strptime(match["local"], _LOCAL_FORMAT)
    offset = timezone(timedelta(hours=int(match["offset"])))
    try:
        return local.replace(tzinfo=offset).astimezone(timezone.utc)
    except OverflowError as e:
        # e.g. 9999-12-31 23:00:00-05 lands past datetime.max once shifted to UTC
        raise ValueError(f"{value!r} is out of range in UTC") from e


def extract_key_clauses(detail: str) -> list[dict[str, str]]:
    """Every `(k1, k2)=(v1, [v2` clause in `detail`, in order, as {k1: v1, k2: v2}."""
    return [
        {match["k1"]: match["v1"], match["k2"]: match["v2"]}
        for match in _KEY_CLAUSE_RE.finditer(detail)
    ]


def parse_conflict(detail: str) -> ReservationConflict:
    clauses = extract_key_clauses(detail)
    if len(clauses) != 2:
        raise ValueError(f"expected 2 key clauses, found {len(clauses)}")

    new, old = clauses
    return ReservationConflict(
        new=ReservationWindow.from_mapping(new),
        old=ReservationWindow.from_mapping(old),
    )


def parse_conflict_info(detail: str) -> ReservationConflictInfo:
    try:
        return Parsed(parse_conflict(detail))
    except ValueError as e:
        logger.debug("Keeping conflict detail unparsed: %s", e)
        return Unparsed(detail)
