from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_session
from app.models import VenueType
from app.schemas.booking import BookingRead, StatusCounts
from app.services.booking_service import BookingService, get_booking_service
from app.services.lifecycle import booked_bucket, history_bucket, pending_bucket, status_counts

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/{venue_type}/pending", response_model=List[BookingRead])
async def pending_bookings(
    venue_type: VenueType,
    include_past: bool = True,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    bookings = await booking_service.list_bookings(db, venue_type)
    return [BookingRead.model_validate(b) for b in pending_bucket(bookings, venue_type, include_past=include_past)]


@router.get("/{venue_type}/booked", response_model=List[BookingRead])
async def booked_bookings(
    venue_type: VenueType,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    bookings = await booking_service.list_bookings(db, venue_type)
    return [BookingRead.model_validate(b) for b in booked_bucket(bookings, venue_type)]


@router.get("/{venue_type}/history", response_model=List[BookingRead])
async def booking_history(
    venue_type: VenueType,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    bookings = await booking_service.list_bookings(db, venue_type)
    return [BookingRead.model_validate(b) for b in history_bucket(bookings, venue_type)]


@router.get("/{venue_type}/counts", response_model=StatusCounts)
async def booking_counts(
    venue_type: VenueType,
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> StatusCounts:
    bookings = await booking_service.list_bookings(db, venue_type)
    return StatusCounts(**status_counts(bookings, venue_type))
