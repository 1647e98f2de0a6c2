from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

from fastapi import Depends, Request

from app.services.email_service import EmailService, get_email_service
from app.stores.verification_store import StoredCode, VerificationCodeStore
from app.utils.config import get_settings

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999
MAX_SUPERSEDED_CODES = 5


class VerificationResult(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


@dataclass
class IssuedCode:
    email: str
    code: str
    expires_at: datetime
    delivered: bool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationService:
    """Issues and checks one-time sign-in codes."""

    def __init__(
        self,
        store: VerificationCodeStore,
        email_service: EmailService,
        ttl: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.email_service = email_service
        self.ttl = ttl
        self.clock = clock

    def _generate_code(self) -> str:
        return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))

    async def issue(self, email: str) -> IssuedCode:
        now = self.clock()
        previous = self.store.get(email)
        superseded: tuple[tuple[str, datetime], ...] = ()
        if previous is not None and now <= previous.expires_at:
            replaced = previous.live_superseded(now) + ((previous.code, previous.expires_at),)
            superseded = replaced[-MAX_SUPERSEDED_CODES:]

        taken = {old_code for old_code, _ in superseded}
        code = self._generate_code()
        while code in taken:
            code = self._generate_code()
        expires_at = now + self.ttl
        # Stored before sending: a failed send still leaves this code valid.
        self.store.put(email, StoredCode(code=code, expires_at=expires_at, superseded=superseded))

        delivered = await self.email_service.send_verification_code_email(email, code)
        if not delivered:
            logger.warning("Verification code stored but not delivered", extra={"email": email})

        self.purge_expired()
        return IssuedCode(email=email, code=code, expires_at=expires_at, delivered=delivered)

    def validate(self, email: str, submitted_code: str) -> VerificationResult:
        stored = self.store.get(email)
        if stored is None:
            return VerificationResult.NOT_FOUND

        now = self.clock()
        if now > stored.expires_at:
            self.store.delete(email)
            return VerificationResult.EXPIRED

        submitted = submitted_code.strip()
        if any(old_code == submitted for old_code, _ in stored.live_superseded(now)):
            return VerificationResult.NOT_FOUND

        if not secrets.compare_digest(stored.code.encode(), submitted.encode()):
            return VerificationResult.MISMATCH

        self.store.delete(email)
        return VerificationResult.OK

    def purge_expired(self) -> int:
        removed = self.store.delete_expired(self.clock())
        if removed:
            logger.info("Purged expired verification codes", extra={"count": len(removed)})
        return len(removed)


def get_verification_store(request: Request) -> VerificationCodeStore:
    return request.app.state.verification_store


def get_verification_service(
    store: VerificationCodeStore = Depends(get_verification_store),
    email_service: EmailService = Depends(get_email_service),
) -> VerificationService:
    settings = get_settings()
    return VerificationService(
        store=store,
        email_service=email_service,
        ttl=timedelta(minutes=settings.verification_code_ttl_minutes),
    )
