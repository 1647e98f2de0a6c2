from __future__ import annotations

import json
from typing import AsyncGenerator

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from app.db.database import get_session
from app.schemas.booking import BookingRead
from app.services.booking_service import BookingService, get_booking_service

router = APIRouter(prefix="/events", tags=["events"])


async def _snapshot_stream(booking_service: BookingService, initial: list) -> AsyncGenerator[str, None]:
    async for snapshot in booking_service.feed.stream(initial):
        yield json.dumps({"type": "bookings", "bookings": snapshot})


@router.get("/bookings")
async def listen(
    db: AsyncSession = Depends(get_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> EventSourceResponse:
    bookings = await booking_service.list_bookings(db)
    initial = [BookingRead.model_validate(booking).model_dump(mode="json") for booking in bookings]
    return EventSourceResponse(_snapshot_stream(booking_service, initial), ping=15)
