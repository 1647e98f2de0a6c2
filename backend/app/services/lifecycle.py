from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from app.models import BookingStatus, VenueType
from app.services.availability import booking_day

TERMINAL_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED})

_ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


class BookingNotFoundError(ValueError):
    pass


class InvalidTransitionError(ValueError):
    def __init__(self, current: BookingStatus, target: BookingStatus) -> None:
        super().__init__(f"Cannot change booking status from {current.value} to {target.value}")
        self.current = current
        self.target = target


class RejectionNotConfirmedError(ValueError):
    pass


class DateOccupiedError(ValueError):
    def __init__(self, venue_type: VenueType, day: date) -> None:
        super().__init__(
            f"{VenueType(venue_type).label} is already booked on {day.isoformat()}. Please choose another date."
        )
        self.venue_type = venue_type
        self.day = day


class ConfirmationOutcome(str, Enum):
    EMAILED = "emailed"
    EMAIL_FAILED = "email_failed"
    NO_EMAIL = "no_email"

    @property
    def message(self) -> str:
        return _OUTCOME_MESSAGES[self]


_OUTCOME_MESSAGES = {
    ConfirmationOutcome.EMAILED: "Booking has been confirmed and email notification has been sent successfully!",
    ConfirmationOutcome.EMAIL_FAILED: "Booking has been confirmed successfully, but email notification could not be sent.",
    ConfirmationOutcome.NO_EMAIL: "Booking has been confirmed successfully! (No email address available)",
}

REJECTED_MESSAGE = "Booking has been rejected successfully."


def effective_status(booking: Any) -> BookingStatus:
    status = getattr(booking, "status", None)
    return BookingStatus(status) if status is not None else BookingStatus.PENDING


def transition(current: Optional[BookingStatus], target: BookingStatus) -> BookingStatus:
    """Return the new status or raise if the move is not allowed.

    Confirmed and cancelled are terminal; only a pending booking moves.
    """

    source = BookingStatus(current) if current is not None else BookingStatus.PENDING
    target = BookingStatus(target)
    if target not in _ALLOWED_TRANSITIONS[source]:
        raise InvalidTransitionError(source, target)
    return target


def _for_venue(bookings: Iterable[Any], venue_type: Optional[VenueType]) -> List[Any]:
    if venue_type is None:
        return list(bookings)
    venue = VenueType(venue_type)
    return [booking for booking in bookings if VenueType(booking.venue_type) is venue]


def _newest_first(bookings: List[Any]) -> List[Any]:
    return sorted(bookings, key=lambda booking: booking_day(booking.date), reverse=True)


def pending_bucket(
    bookings: Iterable[Any],
    venue_type: Optional[VenueType] = None,
    *,
    include_past: bool = True,
    today: Optional[date] = None,
) -> List[Any]:
    pending = [
        booking for booking in _for_venue(bookings, venue_type)
        if effective_status(booking) is BookingStatus.PENDING
    ]
    if not include_past:
        cutoff = today or date.today()
        pending = [booking for booking in pending if booking_day(booking.date) >= cutoff]
    return sorted(pending, key=lambda booking: booking_day(booking.date))


def booked_bucket(bookings: Iterable[Any], venue_type: Optional[VenueType] = None) -> List[Any]:
    return _newest_first([
        booking for booking in _for_venue(bookings, venue_type)
        if effective_status(booking) is BookingStatus.CONFIRMED
    ])


def history_bucket(bookings: Iterable[Any], venue_type: Optional[VenueType] = None) -> List[Any]:
    return _newest_first([
        booking for booking in _for_venue(bookings, venue_type)
        if effective_status(booking) in TERMINAL_STATUSES
    ])


def status_counts(bookings: Iterable[Any], venue_type: Optional[VenueType] = None) -> Dict[str, int]:
    counts = {status.value: 0 for status in BookingStatus}
    for booking in _for_venue(bookings, venue_type):
        counts[effective_status(booking).value] += 1
    return counts
