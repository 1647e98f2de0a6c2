import asyncio
from datetime import date

from app.main import app
from app.models import Booking, BookingStatus, User, UserRole, VenueType
from app.schemas.booking import BookingCreate
from app.services.availability import is_date_occupied
from app.services.booking_service import BookingService
from app.services.email_service import EmailService, get_email_service
from app.utils.config import Settings


def submit(client, payload):
    response = client.post("/api/bookings", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["booking"]


def test_healthcheck(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_submitted_booking_starts_pending(client, booking_payload):
    booking = submit(client, booking_payload())
    assert booking["status"] == "pending"
    assert booking["venue_type"] == "dome-tent"
    assert booking["date"] == "2030-06-01"
    assert booking["equipment_needed"]["tables_quantity"] == 10

    fetched = client.get(f"/api/bookings/{booking['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == booking["id"]


def test_occupied_date_is_rejected_before_write(client, booking_payload):
    submit(client, booking_payload())

    response = client.post("/api/bookings", json=booking_payload(start_time="18:00", end_time="20:00"))
    assert response.status_code == 409
    assert "already booked" in response.json()["detail"]
    assert len(client.get("/api/bookings").json()) == 1


def test_other_venue_same_day_is_free(client, booking_payload):
    submit(client, booking_payload())
    booking = submit(client, booking_payload(venue_type="training-hall"))
    assert booking["venue_type"] == "training-hall"


def test_cancelled_booking_frees_the_date(client, booking_payload):
    booking = submit(client, booking_payload())
    client.post(f"/api/bookings/{booking['id']}/reject", json={"confirmed": True})

    availability = client.get("/api/bookings/availability", params={"venue_type": "dome-tent", "date": "2030-06-01"})
    assert availability.json()["occupied"] is False
    submit(client, booking_payload())


def test_mobile_number_must_have_eleven_digits(client, booking_payload):
    response = client.post("/api/bookings", json=booking_payload(mobile_no="0917123456"))
    assert response.status_code == 422
    response = client.post("/api/bookings", json=booking_payload(mobile_no="0917123456x"))
    assert response.status_code == 422


def test_missing_date_is_rejected(client, booking_payload):
    payload = booking_payload()
    del payload["date"]
    assert client.post("/api/bookings", json=payload).status_code == 422


def test_bad_wall_clock_time_is_rejected(client, booking_payload):
    assert client.post("/api/bookings", json=booking_payload(start_time="8am")).status_code == 422


def test_availability_and_calendar(client, booking_payload):
    submit(client, booking_payload(date="2025-06-14"))
    submit(client, booking_payload(date="2025-06-20", venue_type="training-hall"))

    availability = client.get("/api/bookings/availability", params={"venue_type": "dome-tent", "date": "2025-06-14"})
    assert availability.json() == {"venue_type": "dome-tent", "date": "2025-06-14", "occupied": True}

    calendar = client.get("/api/bookings/calendar", params={"venue_type": "dome-tent", "year": 2025, "month": 6}).json()
    assert calendar["occupied_dates"] == ["2025-06-14"]
    assert calendar["days"][0] == "2025-06-01"
    assert len(calendar["days"]) == 30


def test_confirm_sends_email_to_contact(client, booking_payload, email_service):
    booking = submit(client, booking_payload())

    response = client.post(f"/api/bookings/{booking['id']}/confirm")
    assert response.status_code == 200
    body = response.json()
    assert body["booking"]["status"] == "confirmed"
    assert body["outcome"] == "emailed"
    assert "email notification has been sent" in body["message"]
    assert "maria@example.com" in [sent[1] for sent in email_service.sent if sent[0] == "confirmation"]


def test_confirm_without_email_on_file(client, booking_payload):
    booking = submit(client, booking_payload(client_email=None))
    body = client.post(f"/api/bookings/{booking['id']}/confirm").json()
    assert body["outcome"] == "no_email"
    assert body["booking"]["status"] == "confirmed"


def test_email_failure_does_not_roll_back_confirmation(client, booking_payload, email_service):
    booking = submit(client, booking_payload())
    email_service.deliver = False

    body = client.post(f"/api/bookings/{booking['id']}/confirm").json()
    assert body["outcome"] == "email_failed"
    assert client.get(f"/api/bookings/{booking['id']}").json()["status"] == "confirmed"


def test_terminal_status_cannot_change(client, booking_payload):
    booking = submit(client, booking_payload())
    client.post(f"/api/bookings/{booking['id']}/confirm")

    assert client.post(f"/api/bookings/{booking['id']}/confirm").status_code == 409
    assert client.post(f"/api/bookings/{booking['id']}/reject", json={"confirmed": True}).status_code == 409
    assert client.get(f"/api/bookings/{booking['id']}").json()["status"] == "confirmed"


def test_reject_requires_explicit_confirmation(client, booking_payload):
    booking = submit(client, booking_payload())

    response = client.post(f"/api/bookings/{booking['id']}/reject", json={})
    assert response.status_code == 400
    assert client.get(f"/api/bookings/{booking['id']}").json()["status"] == "pending"

    response = client.post(f"/api/bookings/{booking['id']}/reject", json={"confirmed": True})
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "cancelled"
    assert response.json()["message"] == "Booking has been rejected successfully."


def test_unknown_booking_is_not_found(client):
    assert client.get("/api/bookings/missing").status_code == 404
    assert client.post("/api/bookings/missing/confirm").status_code == 404
    assert client.post("/api/bookings/missing/reject", json={"confirmed": True}).status_code == 404


def test_dashboard_buckets(client, booking_payload):
    first = submit(client, booking_payload(date="2030-01-10"))
    second = submit(client, booking_payload(date="2030-03-10"))
    third = submit(client, booking_payload(date="2030-02-10"))
    submit(client, booking_payload(date="2030-04-10"))
    submit(client, booking_payload(date="2030-01-10", venue_type="training-hall"))

    client.post(f"/api/bookings/{first['id']}/confirm")
    client.post(f"/api/bookings/{second['id']}/reject", json={"confirmed": True})
    client.post(f"/api/bookings/{third['id']}/confirm")

    history = client.get("/api/dashboard/dome-tent/history").json()
    assert [b["date"] for b in history] == ["2030-03-10", "2030-02-10", "2030-01-10"]

    booked = client.get("/api/dashboard/dome-tent/booked").json()
    assert [b["id"] for b in booked] == [third["id"], first["id"]]

    pending = client.get("/api/dashboard/dome-tent/pending").json()
    assert [b["date"] for b in pending] == ["2030-04-10"]

    counts = client.get("/api/dashboard/dome-tent/counts").json()
    assert counts == {"pending": 1, "confirmed": 2, "cancelled": 1}


def test_admins_from_user_table_are_notified(client, database, booking_payload, email_service):
    async def add_users():
        async with database() as session:
            session.add_all([
                User(uid="admin-1", email="admin@example.com", role=UserRole.ADMIN),
                User(uid="admin-2", email="dome@example.com", role=UserRole.ADMIN_DOME),
                User(uid="user-1", email="user@example.com", role=UserRole.USER),
            ])
            await session.commit()

    asyncio.run(add_users())
    response = client.post("/api/bookings", json=booking_payload())
    assert response.json()["admins_notified"] == {"admin@example.com": True}


def test_configured_admin_emails_take_precedence(monkeypatch, database, booking_payload, email_service):
    monkeypatch.setattr(
        "app.services.booking_service.get_settings",
        lambda: Settings(ADMIN_EMAILS="one@example.com, two@example.com"),
    )

    async def recipients():
        async with database() as session:
            return await BookingService(email_service=email_service).admin_recipients(session)

    assert asyncio.run(recipients()) == ["one@example.com", "two@example.com"]


def test_store_accepts_second_booking_written_without_check(database, booking_payload, email_service):
    service = BookingService(email_service=email_service)
    payload = BookingCreate(**booking_payload(date="2025-06-01"))

    async def run():
        async with database() as session:
            await service.create_booking(session, payload)
            occupied_before_second_write = is_date_occupied(
                await service.list_bookings(session), VenueType.DOME_TENT, payload.date
            )
            await service.create_booking(session, payload)
            return occupied_before_second_write, await service.list_bookings(session)

    occupied, bookings = asyncio.run(run())
    assert occupied is True
    assert len(bookings) == 2
    assert all(isinstance(booking, Booking) for booking in bookings)


def test_client_email_with_line_breaks_is_rejected(client, booking_payload):
    response = client.post("/api/bookings", json=booking_payload(client_email="maria@example.com\r\nBcc: other@x.com"))
    assert response.status_code == 422
    assert client.post("/api/bookings", json=booking_payload(client_email="not-an-email")).status_code == 422


def test_blank_client_email_is_stored_as_missing(client, booking_payload):
    booking = submit(client, booking_payload(client_email="  "))
    assert booking["client_email"] is None


def test_unsendable_stored_email_still_confirms(client, database, monkeypatch):
    async def add_booking():
        async with database() as session:
            booking = Booking(
                venue_type=VenueType.DOME_TENT,
                date=date(2030, 7, 1),
                start_time="08:00",
                end_time="17:00",
                mobile_no="09171234567",
                client_email="maria@example.com\r\nBcc: other@x.com",
                status=BookingStatus.PENDING,
            )
            session.add(booking)
            await session.commit()
            return booking.id

    booking_id = asyncio.run(add_booking())
    delivered = []
    sender = EmailService(Settings(EMAIL_USER="noreply@example.com", EMAIL_PASSWORD="app-password"))
    monkeypatch.setattr(sender, "_deliver", delivered.append)
    app.dependency_overrides[get_email_service] = lambda: sender

    response = client.post(f"/api/bookings/{booking_id}/confirm")
    assert response.status_code == 200
    assert response.json()["outcome"] == "email_failed"
    assert response.json()["booking"]["status"] == "confirmed"
    assert delivered == []


def test_run_serves_app_on_configured_port(monkeypatch):
    import uvicorn

    from app import main

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **options: calls.append((target, options)))
    monkeypatch.setattr(main, "settings", Settings(BACKEND_PORT=8123))
    main.run()
    assert calls == [("app.main:app", {"host": "0.0.0.0", "port": 8123})]
