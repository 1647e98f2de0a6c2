import asyncio
import os
import tempfile
from pathlib import Path

_DB_PATH = Path(tempfile.mkdtemp(prefix="venuebooking-tests-")) / "app.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["ADMIN_EMAILS"] = ""
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASSWORD"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.db.base import Base  # noqa: E402
from app.db.database import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.services.email_service import EmailService, get_email_service  # noqa: E402
from app.stores.verification_store import VerificationCodeStore  # noqa: E402

engine = create_async_engine(os.environ["DATABASE_URL"], poolclass=NullPool)
session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


class RecordingEmailService(EmailService):
    def __init__(self, configured: bool = True, deliver: bool = True) -> None:
        self.configured = configured
        self.deliver = deliver
        self.sent: list[tuple] = []

    def is_configured(self) -> bool:  # type: ignore[override]
        return self.configured

    async def send_confirmation_email(self, to_address, booking):  # type: ignore[override]
        self.sent.append(("confirmation", to_address, booking))
        return self.deliver

    async def send_admin_notification(self, booking, recipients):  # type: ignore[override]
        self.sent.append(("admin", tuple(recipients), booking))
        return {address: self.deliver for address in recipients}

    async def send_verification_code_email(self, to_address, code):  # type: ignore[override]
        self.sent.append(("verification", to_address, code))
        return self.deliver

    def codes_for(self, email: str) -> list[str]:
        return [code for kind, to, code in self.sent if kind == "verification" and to == email]


async def _reset_schema() -> None:
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)


async def _override_session():
    async with session_factory() as session:
        yield session


@pytest.fixture
def database():
    asyncio.run(_reset_schema())
    return session_factory


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest.fixture
def client(database, email_service):
    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.state.verification_store = VerificationCodeStore()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _booking_payload(**overrides):
    payload = {
        "venue_type": "dome-tent",
        "date": "2030-06-01",
        "start_time": "08:00",
        "end_time": "17:00",
        "contact_person": "Maria Santos",
        "requesting_office": "Provincial Health Office",
        "mobile_no": "09171234567",
        "client_email": "maria@example.com",
        "event_title": "Health Summit",
        "equipment_needed": {"tables": True, "tables_quantity": 10, "sound_system": True},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def booking_payload():
    return _booking_payload
