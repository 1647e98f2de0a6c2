"""Whole-day availability per venue.

A venue is booked by the day: any pending or confirmed booking occupies its
calendar date regardless of start and end times. Cancelled bookings never
occupy. Everything here works on a snapshot of bookings and has no side effects.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Set

from app.models import BookingStatus, VenueType

OCCUPYING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


def booking_day(value: Any) -> Optional[date]:
    """Reduce a date, datetime or ISO string to a local calendar day."""

    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return booking_day(datetime.fromisoformat(text))
    raise TypeError(f"Unsupported date value: {value!r}")


def occupies_date(booking: Any) -> bool:
    status = getattr(booking, "status", None)
    return status is None or BookingStatus(status) in OCCUPYING_STATUSES


def _matches_venue(booking: Any, venue_type: VenueType) -> bool:
    return VenueType(booking.venue_type) is VenueType(venue_type)


def is_date_occupied(bookings: Iterable[Any], venue_type: VenueType, candidate: Any) -> bool:
    day = booking_day(candidate)
    if day is None:
        return False
    return any(
        _matches_venue(booking, venue_type)
        and occupies_date(booking)
        and booking_day(booking.date) == day
        for booking in bookings
    )


def occupied_dates(bookings: Iterable[Any], venue_type: VenueType, year: int, month: int) -> Set[date]:
    days: Set[date] = set()
    for booking in bookings:
        if not _matches_venue(booking, venue_type) or not occupies_date(booking):
            continue
        day = booking_day(booking.date)
        if day is not None and day.year == year and day.month == month:
            days.add(day)
    return days


def bookings_on(bookings: Iterable[Any], day: Any) -> List[Any]:
    target = booking_day(day)
    if target is None:
        return []
    return [booking for booking in bookings if booking_day(booking.date) == target]


def month_grid(year: int, month: int) -> List[Optional[date]]:
    """Cells for a Sunday-first month view; leading blanks are None."""

    first = date(year, month, 1)
    # date.weekday() is Monday=0; shift so Sunday lands in column 0.
    leading = (first.weekday() + 1) % 7
    _, days_in_month = calendar.monthrange(year, month)
    cells: List[Optional[date]] = [None] * leading
    cells.extend(date(year, month, day) for day in range(1, days_in_month + 1))
    return cells
