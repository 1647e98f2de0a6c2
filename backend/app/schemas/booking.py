from __future__ import annotations

import re
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models import BookingStatus, VenueType

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")
MOBILE_NUMBER_LENGTH = 11


class TypeOfActivity(BaseModel):
    training: bool = False
    seminar: bool = False
    workshop: bool = False
    meeting: bool = False
    others: Optional[str] = None


class RoomLayoutPreference(BaseModel):
    classroom: bool = False
    theater: bool = False
    u_shape: bool = False
    boardroom: bool = False


class EquipmentNeeded(BaseModel):
    projector_and_screen: bool = False
    lectern: bool = False
    tables: bool = False
    tables_quantity: Optional[int] = Field(None, ge=0)
    whiteboard: bool = False
    sound_system: bool = False
    flag_stand: bool = False
    chairs: bool = False
    chairs_quantity: Optional[int] = Field(None, ge=0)
    others: Optional[str] = None


class BookingCreate(BaseModel):
    venue_type: VenueType
    date: dt.date
    start_time: str
    end_time: str
    booking_reference_no: Optional[str] = None
    date_of_request: Optional[str] = None
    contact_person: Optional[str] = None
    requesting_office: Optional[str] = None
    mobile_no: str
    client_email: Optional[str] = None
    event_title: Optional[str] = None
    type_of_event: Optional[str] = None
    type_of_activity: TypeOfActivity = Field(default_factory=TypeOfActivity)
    preferred_dates: Optional[str] = None
    expected_number_of_participants: Optional[int] = Field(None, ge=0)
    room_layout_preference: RoomLayoutPreference = Field(default_factory=RoomLayoutPreference)
    equipment_needed: EquipmentNeeded = Field(default_factory=EquipmentNeeded)
    additional_notes: Optional[str] = None

    @field_validator("mobile_no")
    @classmethod
    def check_mobile_no(cls, value: str) -> str:
        value = value.strip()
        if len(value) != MOBILE_NUMBER_LENGTH or not value.isdigit():
            raise ValueError(f"Please enter a valid {MOBILE_NUMBER_LENGTH}-digit mobile number.")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def check_wall_clock(cls, value: str) -> str:
        if not _TIME_PATTERN.match(value):
            raise ValueError("Time must be HH:MM in 24-hour format")
        return value

    @field_validator("client_email")
    @classmethod
    def check_client_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not _EMAIL_PATTERN.match(value):
            raise ValueError("Please enter a valid email address.")
        return value


class BookingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    venue_type: VenueType
    date: dt.date
    start_time: str
    end_time: str
    status: BookingStatus = BookingStatus.PENDING
    booking_reference_no: Optional[str] = None
    date_of_request: Optional[str] = None
    contact_person: Optional[str] = None
    requesting_office: Optional[str] = None
    mobile_no: Optional[str] = None
    client_email: Optional[str] = None
    event_title: Optional[str] = None
    type_of_event: Optional[str] = None
    type_of_activity: TypeOfActivity = Field(default_factory=TypeOfActivity)
    preferred_dates: Optional[str] = None
    expected_number_of_participants: Optional[int] = None
    room_layout_preference: RoomLayoutPreference = Field(default_factory=RoomLayoutPreference)
    equipment_needed: EquipmentNeeded = Field(default_factory=EquipmentNeeded)
    additional_notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def default_missing_status(cls, value: Optional[BookingStatus]) -> BookingStatus:
        return value or BookingStatus.PENDING

    @field_validator("type_of_activity", "room_layout_preference", "equipment_needed", mode="before")
    @classmethod
    def default_missing_flags(cls, value):
        return value or {}


class BookingSubmitted(BaseModel):
    booking: BookingRead
    admins_notified: dict[str, bool] = Field(default_factory=dict)


class AvailabilityResponse(BaseModel):
    venue_type: VenueType
    date: dt.date
    occupied: bool


class CalendarResponse(BaseModel):
    venue_type: VenueType
    year: int
    month: int
    occupied_dates: List[dt.date]
    days: List[Optional[dt.date]]


class RejectRequest(BaseModel):
    confirmed: bool = False


class TransitionResponse(BaseModel):
    booking: BookingRead
    outcome: Optional[str] = None
    message: str


class StatusCounts(BaseModel):
    pending: int = 0
    confirmed: int = 0
    cancelled: int = 0
