from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Booking, BookingStatus, User, UserRole, VenueType
from app.schemas.booking import BookingCreate, BookingRead
from app.services.availability import is_date_occupied
from app.services.email_service import EmailService, get_email_service
from app.services.lifecycle import (
    BookingNotFoundError,
    ConfirmationOutcome,
    DateOccupiedError,
    InvalidTransitionError,
    RejectionNotConfirmedError,
    effective_status,
    transition,
)
from app.stores.event_bus import BookingFeed
from app.utils.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    booking: Booking
    admins_notified: Dict[str, bool] = field(default_factory=dict)


@dataclass
class ConfirmationResult:
    booking: Booking
    outcome: ConfirmationOutcome


class BookingService:
    """Coordinates booking persistence, status changes, and notifications."""

    def __init__(self, email_service: EmailService | None = None, feed: BookingFeed | None = None) -> None:
        self.email_service = email_service or get_email_service()
        self.feed = feed

    async def list_bookings(self, session: AsyncSession, venue_type: Optional[VenueType] = None) -> List[Booking]:
        stmt = select(Booking).order_by(Booking.date.asc(), Booking.created_at.asc())
        if venue_type is not None:
            stmt = stmt.where(Booking.venue_type == venue_type)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_booking(self, session: AsyncSession, booking_id: str) -> Booking:
        booking = await session.get(Booking, booking_id)
        if not booking:
            raise BookingNotFoundError("Booking not found")
        return booking

    async def check_availability(self, session: AsyncSession, venue_type: VenueType, day: Optional[date]) -> bool:
        """True when the day is already taken for the venue."""

        bookings = await self.list_bookings(session, venue_type)
        return is_date_occupied(bookings, venue_type, day)

    async def create_booking(self, session: AsyncSession, payload: BookingCreate) -> Booking:
        booking = Booking(
            **payload.model_dump(exclude={"type_of_activity", "room_layout_preference", "equipment_needed"}),
            type_of_activity=payload.type_of_activity.model_dump(exclude_none=True),
            room_layout_preference=payload.room_layout_preference.model_dump(),
            equipment_needed=payload.equipment_needed.model_dump(exclude_none=True),
            status=BookingStatus.PENDING,
        )
        session.add(booking)
        await session.commit()
        await session.refresh(booking)
        return booking

    async def submit_booking(self, session: AsyncSession, payload: BookingCreate) -> SubmissionResult:
        # Read-then-write with no lock: two concurrent submissions can both pass.
        if await self.check_availability(session, payload.venue_type, payload.date):
            logger.info(
                "Booking rejected, date occupied",
                extra={"venue_type": payload.venue_type.value, "date": payload.date.isoformat()},
            )
            raise DateOccupiedError(payload.venue_type, payload.date)

        booking = await self.create_booking(session, payload)
        logger.info(
            "Booking submitted",
            extra={"booking_id": booking.id, "venue_type": booking.venue_type.value, "date": booking.date.isoformat()},
        )

        recipients = await self.admin_recipients(session)
        if recipients:
            notified = await self.email_service.send_admin_notification(BookingRead.model_validate(booking), recipients)
        else:
            logger.warning("No admin emails found to notify", extra={"booking_id": booking.id})
            notified = {}

        await self._publish(session)
        return SubmissionResult(booking=booking, admins_notified=notified)

    async def admin_recipients(self, session: AsyncSession) -> List[str]:
        configured = get_settings().admin_email_list
        if configured:
            return configured
        stmt = select(User.email).where(User.role == UserRole.ADMIN).order_by(User.email)
        result = await session.execute(stmt)
        return [email for email in result.scalars().all() if email]

    async def _set_status(self, session: AsyncSession, booking_id: str, target: BookingStatus) -> Booking:
        booking = await self.get_booking(session, booking_id)
        try:
            booking.status = transition(effective_status(booking), target)
        except InvalidTransitionError:
            logger.warning(
                "Rejected booking status change",
                extra={"booking_id": booking_id, "status": effective_status(booking).value, "target": target.value},
            )
            raise
        await session.commit()
        await session.refresh(booking)
        logger.info("Booking status updated", extra={"booking_id": booking_id, "status": target.value})
        return booking

    async def confirm_booking(self, session: AsyncSession, booking_id: str) -> ConfirmationResult:
        booking = await self._set_status(session, booking_id, BookingStatus.CONFIRMED)
        await self._publish(session)

        if not booking.client_email:
            outcome = ConfirmationOutcome.NO_EMAIL
        elif await self.email_service.send_confirmation_email(booking.client_email, BookingRead.model_validate(booking)):
            outcome = ConfirmationOutcome.EMAILED
        else:
            outcome = ConfirmationOutcome.EMAIL_FAILED
        return ConfirmationResult(booking=booking, outcome=outcome)

    async def reject_booking(self, session: AsyncSession, booking_id: str, confirmed: bool) -> Booking:
        if not confirmed:
            raise RejectionNotConfirmedError("Rejection must be explicitly confirmed")
        booking = await self._set_status(session, booking_id, BookingStatus.CANCELLED)
        await self._publish(session)
        return booking

    async def _publish(self, session: AsyncSession) -> None:
        if self.feed is None or not self.feed.subscriber_count():
            return
        bookings = await self.list_bookings(session)
        self.feed.publish([BookingRead.model_validate(booking).model_dump(mode="json") for booking in bookings])


def get_booking_feed(request: Request) -> BookingFeed:
    return request.app.state.booking_feed


def get_booking_service(
    feed: BookingFeed = Depends(get_booking_feed),
    email_service: EmailService = Depends(get_email_service),
) -> BookingService:
    return BookingService(email_service=email_service, feed=feed)
