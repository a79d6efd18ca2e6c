from __future__ import annotations

from datetime import datetime, timezone

import pytest

from rsvp.core.entities.conflict import (
    Parsed,
    ReservationConflict,
    ReservationWindow,
    Unparsed,
    extract_key_clauses,
    parse_conflict,
    parse_conflict_info,
    parse_datetime,
)

ERR_MSG = (
    'Key (resource_id, timespan)=(ocean-view-room-777, ["2022-12-26 22:00:00+00","2022-12-30 19:00:00+00")) '
    "conflicts with existing key "
    '(resource_id, timespan)=(ocean-view-room-777, ["2022-12-25 22:00:00+00","2022-12-28 19:00:00+00")).'
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_parse_datetime_should_work() -> None:
    dt = parse_datetime("2022-12-26 22:00:00+00")
    assert dt.isoformat() == "2022-12-26T22:00:00+00:00"


def test_parse_datetime_normalizes_hour_offset_to_utc() -> None:
    assert parse_datetime("2022-12-26 15:00:00-07") == _utc(2022, 12, 26, 22)
    assert parse_datetime("2022-12-26 15:00:00-07").utcoffset().total_seconds() == 0


@pytest.mark.parametrize(
    "value",
    [
        "2022-12-26T22:00:00+00",       # ISO separator
        "2022-12-26 22:00:00+00:00",    # minutes in the offset
        "2022-12-26 22:00:00.5+00",     # fractional seconds
        "2022-12-26 22:00:00",          # no offset
        "2022-13-26 22:00:00+00",       # no such month
        "2022-02-30 22:00:00+00",       # no such day
        "2022-12-26 22:00:00+99",       # offset beyond a day
        "9999-12-31 23:00:00-05",       # past datetime.max in UTC
        "0001-01-01 00:00:00+05",       # before datetime.min in UTC
        " 2022-12-26 22:00:00+00",
    ],
)
def test_parse_datetime_rejects_other_formats(value: str) -> None:
    with pytest.raises(ValueError):
        parse_datetime(value)


def test_extract_key_clauses_keeps_clause_order() -> None:
    new, old = extract_key_clauses(ERR_MSG)

    assert new["resource_id"] == "ocean-view-room-777"
    assert new["timespan"] == '"2022-12-26 22:00:00+00","2022-12-30 19:00:00+00"'
    assert old["resource_id"] == "ocean-view-room-777"
    assert old["timespan"] == '"2022-12-25 22:00:00+00","2022-12-28 19:00:00+00"'


def test_mapping_to_reservation_window_should_work() -> None:
    window = ReservationWindow.from_mapping(
        {
            "resource_id": "ocean-view-room-713",
            "timespan": '"2022-12-26 22:00:00+00","2022-12-30 19:00:00+00"',
        }
    )

    assert window.resource_id == "ocean-view-room-713"
    assert window.start.isoformat() == "2022-12-26T22:00:00+00:00"
    assert window.end.isoformat() == "2022-12-30T19:00:00+00:00"


@pytest.mark.parametrize(
    "values",
    [
        {"timespan": '"2022-12-26 22:00:00+00","2022-12-30 19:00:00+00"'},
        {"resource_id": "room"},
        {"resource_id": "room", "timespan": '"2022-12-26 22:00:00+00"'},
        {"resource_id": "room", "timespan": '"2022-12-26 22:00:00+00",infinity'},
    ],
)
def test_mapping_to_reservation_window_rejects_incomplete_clause(values: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        ReservationWindow.from_mapping(values)


def test_conflict_error_message_should_parse() -> None:
    info = parse_conflict_info(ERR_MSG)

    assert info == Parsed(
        ReservationConflict(
            new=ReservationWindow("ocean-view-room-777", _utc(2022, 12, 26, 22), _utc(2022, 12, 30, 19)),
            old=ReservationWindow("ocean-view-room-777", _utc(2022, 12, 25, 22), _utc(2022, 12, 28, 19)),
        )
    )


def test_parse_conflict_requires_exactly_two_clauses() -> None:
    single = ERR_MSG.split(" conflicts with")[0]
    with pytest.raises(ValueError, match="found 1"):
        parse_conflict(single)
    with pytest.raises(ValueError, match="found 3"):
        parse_conflict(ERR_MSG + " " + single)


@pytest.mark.parametrize(
    "detail",
    [
        "",
        "duplicate key value violates unique constraint",
        ERR_MSG.split(" conflicts with")[0],
        ERR_MSG.replace("+00", "+00:00"),
        ERR_MSG.replace("2022-12-30 19:00:00+00", "garbage"),
        ERR_MSG + " " + ERR_MSG,
    ],
)
def test_unrecognized_detail_is_kept_verbatim(detail: str) -> None:
    assert parse_conflict_info(detail) == Unparsed(detail)


@pytest.mark.parametrize(
    "bad, good",
    [
        ("2022-02-30 22:00:00+00", "2022-12-26 22:00:00+00"),
        ("2022-12-26 22:00:00+99", "2022-12-26 22:00:00+00"),
        ("9999-12-31 23:00:00-05", "2022-12-30 19:00:00+00"),
        ("0001-01-01 00:00:00+05", "2022-12-25 22:00:00+00"),
    ],
)
def test_well_formed_clauses_with_undecodable_times_are_kept_verbatim(bad: str, good: str) -> None:
    detail = ERR_MSG.replace(good, bad)
    assert len(extract_key_clauses(detail)) == 2

    assert parse_conflict_info(detail) == Unparsed(detail)


def test_conflict_info_is_hashable_and_immutable() -> None:
    info = parse_conflict_info(ERR_MSG)
    assert hash(info) == hash(parse_conflict_info(ERR_MSG))

    with pytest.raises(AttributeError):
        info.conflict.new.resource_id = "other-room"  # type: ignore[misc]
