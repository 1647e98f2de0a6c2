from __future__ import annotations

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_session
from app.models import VenueType
from app.schemas.booking import (
    AvailabilityResponse,
    BookingCreate,
    BookingRead,
    BookingSubmitted,
    CalendarResponse,
    RejectRequest,
    TransitionResponse,
)
from app.services.availability import month_grid, occupied_dates
from app.services.booking_service import BookingService, get_booking_service
from app.services.lifecycle import (
    REJECTED_MESSAGE,
    BookingNotFoundError,
    DateOccupiedError,
    InvalidTransitionError,
    RejectionNotConfirmedError,
)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingSubmitted, status_code=status.HTTP_201_CREATED)
async def submit_booking(
    payload: BookingCreate,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingSubmitted:
    try:
        result = await booking_service.submit_booking(db, payload)
    except DateOccupiedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return BookingSubmitted(
        booking=BookingRead.model_validate(result.booking),
        admins_notified=result.admins_notified,
    )


@router.get("", response_model=List[BookingRead])
async def list_bookings(
    venue_type: Optional[VenueType] = None,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    bookings = await booking_service.list_bookings(db, venue_type)
    return [BookingRead.model_validate(booking) for booking in bookings]


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    venue_type: VenueType,
    date: dt.date,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> AvailabilityResponse:
    occupied = await booking_service.check_availability(db, venue_type, date)
    return AvailabilityResponse(venue_type=venue_type, date=date, occupied=occupied)


@router.get("/calendar", response_model=CalendarResponse)
async def month_calendar(
    venue_type: VenueType,
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> CalendarResponse:
    bookings = await booking_service.list_bookings(db, venue_type)
    return CalendarResponse(
        venue_type=venue_type,
        year=year,
        month=month,
        occupied_dates=sorted(occupied_dates(bookings, venue_type, year, month)),
        days=month_grid(year, month),
    )


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: str,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingRead:
    try:
        booking = await booking_service.get_booking(db, booking_id)
    except BookingNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/confirm", response_model=TransitionResponse)
async def confirm_booking(
    booking_id: str,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> TransitionResponse:
    try:
        result = await booking_service.confirm_booking(db, booking_id)
    except BookingNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return TransitionResponse(
        booking=BookingRead.model_validate(result.booking),
        outcome=result.outcome.value,
        message=result.outcome.message,
    )


@router.post("/{booking_id}/reject", response_model=TransitionResponse)
async def reject_booking(
    booking_id: str,
    payload: RejectRequest,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> TransitionResponse:
    try:
        booking = await booking_service.reject_booking(db, booking_id, confirmed=payload.confirmed)
    except RejectionNotConfirmedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BookingNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return TransitionResponse(booking=BookingRead.model_validate(booking), message=REJECTED_MESSAGE)
