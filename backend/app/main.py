from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.db.database import dispose_engine
from app.routes import auth, booking, dashboard, events
from app.stores.event_bus import BookingFeed
from app.stores.verification_store import VerificationCodeStore
from app.utils.config import get_settings

logging.basicConfig(level=logging.INFO)

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    await dispose_engine()


app = FastAPI(title="Venue Booking API", version="0.1.0", lifespan=lifespan)

# Process-local state; codes and subscribers do not survive a restart.
app.state.verification_store = VerificationCodeStore()
app.state.booking_feed = BookingFeed()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

app.include_router(auth.router, prefix="/api")
app.include_router(booking.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")
app.include_router(events.router, prefix="/api")


@app.get("/health")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    # One worker: the code store and booking feed live in this process.
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.backend_port)
