from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from threading import RLock
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class StoredCode:
    code: str
    expires_at: datetime
    # (code, expires_at) pairs replaced by a re-issue while still live.
    superseded: Tuple[Tuple[str, datetime], ...] = ()

    def live_superseded(self, now: datetime) -> Tuple[Tuple[str, datetime], ...]:
        return tuple((code, expires_at) for code, expires_at in self.superseded if now <= expires_at)


class VerificationCodeStore:
    """Thread-safe in-memory code cache, one entry per email.

    Entries live only as long as the process and are not shared between
    instances.
    """

    def __init__(self) -> None:
        self._codes: Dict[str, StoredCode] = {}
        self._lock = RLock()

    def put(self, email: str, entry: StoredCode) -> None:
        with self._lock:
            self._codes[email] = entry

    def get(self, email: str) -> Optional[StoredCode]:
        with self._lock:
            return self._codes.get(email)

    def delete(self, email: str) -> None:
        with self._lock:
            self._codes.pop(email, None)

    def delete_expired(self, now: datetime) -> List[str]:
        with self._lock:
            expired = [email for email, entry in self._codes.items() if now > entry.expires_at]
            for email in expired:
                del self._codes[email]
            return expired

    def __len__(self) -> int:
        with self._lock:
            return len(self._codes)
