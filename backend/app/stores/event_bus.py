from __future__ import annotations

import asyncio
import logging
from threading import RLock
from typing import Any, AsyncIterator, Callable, Dict, List

logger = logging.getLogger(__name__)

Snapshot = List[Dict[str, Any]]
SnapshotCallback = Callable[[Snapshot], None]


class BookingFeed:
    """In-memory fan-out of full booking snapshots to live subscribers."""

    def __init__(self) -> None:
        self._subscribers: Dict[int, SnapshotCallback] = {}
        self._next_token = 0
        self._lock = RLock()

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, snapshot: Snapshot) -> None:
        with self._lock:
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Booking feed subscriber failed")
        logger.info("bookings_published", extra={"subscribers": len(callbacks), "bookings": len(snapshot)})

    async def stream(self, initial: Snapshot | None = None) -> AsyncIterator[Snapshot]:
        queue: asyncio.Queue[Snapshot] = asyncio.Queue()
        if initial is not None:
            queue.put_nowait(initial)
        unsubscribe = self.subscribe(queue.put_nowait)
        try:
            while True:
                yield await queue.get()
        finally:
            unsubscribe()
