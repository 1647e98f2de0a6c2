from __future__ import annotations

import uuid
import datetime as dt
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import Date, DateTime, Enum as PgEnum, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from app.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


class VenueType(str, Enum):
    DOME_TENT = "dome-tent"
    TRAINING_HALL = "training-hall"

    @property
    def label(self) -> str:
        return "Dome Tent" if self is VenueType.DOME_TENT else "Training Hall"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


def _new_booking_id() -> str:
    return uuid.uuid4().hex


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_booking_id)
    venue_type: Mapped[VenueType] = mapped_column(PgEnum(VenueType, name="venue_type"), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    # NULL is read as pending; rows written before the column existed carry no status.
    status: Mapped[Optional[BookingStatus]] = mapped_column(
        PgEnum(BookingStatus, name="booking_status"),
        default=BookingStatus.PENDING,
        nullable=True,
    )

    booking_reference_no: Mapped[str | None] = mapped_column(String(64))
    date_of_request: Mapped[str | None] = mapped_column(String(32))
    contact_person: Mapped[str | None] = mapped_column(String(255))
    requesting_office: Mapped[str | None] = mapped_column(String(255))
    mobile_no: Mapped[str | None] = mapped_column(String(11))
    client_email: Mapped[str | None] = mapped_column(String(255))
    event_title: Mapped[str | None] = mapped_column(String(255))
    type_of_event: Mapped[str | None] = mapped_column(String(255))
    type_of_activity: Mapped[Dict[str, Any]] = mapped_column(JSONType, default=dict)
    preferred_dates: Mapped[str | None] = mapped_column(String(255))
    expected_number_of_participants: Mapped[int | None] = mapped_column(Integer)
    room_layout_preference: Mapped[Dict[str, Any]] = mapped_column(JSONType, default=dict)
    equipment_needed: Mapped[Dict[str, Any]] = mapped_column(JSONType, default=dict)
    additional_notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
