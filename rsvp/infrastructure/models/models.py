from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DDL, Enum, Index, String, Text, event, text
from sqlalchemy.dialects.postgresql import TSTZRANGE, UUID, ExcludeConstraint, Range
from sqlalchemy.orm import Mapped, mapped_column

from rsvp.infrastructure.database import Base
from rsvp.schemas.models import ReservationStatus

SCHEMA = "rsvp"
TABLE = "reservations"


class RsvpStatus(str, enum.Enum):
    """Database counterpart of ReservationStatus (rsvp.reservation_status)."""
    unknown = "unknown"
    pending = "pending"
    confirmed = "confirmed"
    blocked = "blocked"

    @classmethod
    def from_wire(cls, status: ReservationStatus) -> RsvpStatus:
        return cls(status.name.lower())

    def to_wire(self) -> ReservationStatus:
        return ReservationStatus[self.value.capitalize()]


reservation_status = Enum(
    RsvpStatus,
    name="reservation_status",
    schema=SCHEMA,
    values_callable=lambda members: [m.value for m in members],
)


class ReservationModel(Base):
    __tablename__ = TABLE
    __table_args__ = (
        # the store, not the application, rejects overlapping windows on one resource
        ExcludeConstraint(
            ("resource_id", "="),
            ("timespan", "&&"),
            name="reservations_conflict",
            using="gist",
        ),
        Index("reservations_user_id_idx", "user_id"),
        Index("reservations_resource_id_idx", "resource_id"),
        {"schema": SCHEMA},
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    resource_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timespan: Mapped[Range[datetime]] = mapped_column(TSTZRANGE, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[RsvpStatus] = mapped_column(
        reservation_status, nullable=False, server_default=RsvpStatus.pending.value
    )


# Filtered, paginated read path. NULL uid/rid match any user/resource;
# page_size outside 10..100 falls back to 10 and page below 1 becomes 1.
# Rows are ordered by start, then id, so pages never overlap.
QUERY_FUNCTION = DDL(
    """
CREATE OR REPLACE FUNCTION rsvp.query(
    uid text,
    rid text,
    during tstzrange,
    _status rsvp.reservation_status,
    page integer DEFAULT 1,
    is_desc bool DEFAULT false,
    page_size integer DEFAULT 10
) RETURNS SETOF rsvp.reservations AS $$
BEGIN
    IF page_size < 10 OR page_size > 100 THEN
        page_size := 10;
    END IF;
    IF page < 1 THEN
        page := 1;
    END IF;

    RETURN QUERY
        SELECT * FROM rsvp.reservations r
        WHERE (uid IS NULL OR r.user_id = uid)
          AND (rid IS NULL OR r.resource_id = rid)
          AND r.timespan && during
          AND r.status = _status
        ORDER BY
            CASE WHEN is_desc THEN lower(r.timespan) END DESC,
            CASE WHEN is_desc THEN r.id END DESC,
            CASE WHEN NOT is_desc THEN lower(r.timespan) END ASC,
            CASE WHEN NOT is_desc THEN r.id END ASC
        LIMIT page_size OFFSET (page - 1) * page_size;
END;
$$ LANGUAGE plpgsql
"""
)

event.listen(Base.metadata, "before_create", DDL("CREATE EXTENSION IF NOT EXISTS btree_gist"))
event.listen(Base.metadata, "before_create", DDL(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}"))
event.listen(ReservationModel.__table__, "after_create", QUERY_FUNCTION)
event.listen(ReservationModel.__table__, "before_drop", DDL("DROP FUNCTION IF EXISTS rsvp.query"))
