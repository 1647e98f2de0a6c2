from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from datetime import date
from email.message import EmailMessage
from html import escape
from typing import Dict, List, Sequence, Tuple

from app.schemas.booking import BookingRead, EquipmentNeeded
from app.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


def format_long_date(value: date) -> str:
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"


def format_time_12h(value: str) -> str:
    if not value:
        return ""
    hours, minutes = value.split(":", 1)
    hour = int(hours)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minutes} {suffix}"


def equipment_summary(equipment: EquipmentNeeded) -> str:
    items: List[str] = []
    if equipment.projector_and_screen:
        items.append("Projector and Screen")
    if equipment.lectern:
        items.append("Lectern")
    if equipment.tables:
        items.append(f"Tables ({equipment.tables_quantity})" if equipment.tables_quantity else "Tables")
    if equipment.whiteboard:
        items.append("Whiteboard")
    if equipment.sound_system:
        items.append("Sound System")
    if equipment.flag_stand:
        items.append("Flag Stand")
    if equipment.chairs:
        items.append(f"Chairs ({equipment.chairs_quantity})" if equipment.chairs_quantity else "Chairs")
    if equipment.others:
        items.append(equipment.others)
    return ", ".join(items) if items else "None"


def booking_details(booking: BookingRead) -> List[Tuple[str, str]]:
    rows = [
        ("Venue", booking.venue_type.label),
        ("Event", booking.event_title or "Not specified"),
        ("Date", format_long_date(booking.date)),
        ("Time", f"{format_time_12h(booking.start_time)} - {format_time_12h(booking.end_time)}"),
        ("Contact Person", booking.contact_person or "Not specified"),
        ("Requesting Office", booking.requesting_office or "Not specified"),
        ("Mobile No.", booking.mobile_no or "Not specified"),
    ]
    if booking.expected_number_of_participants is not None:
        rows.append(("Expected Participants", str(booking.expected_number_of_participants)))
    rows.append(("Equipment Needed", equipment_summary(booking.equipment_needed)))
    if booking.additional_notes:
        rows.append(("Additional Notes", booking.additional_notes))
    return rows


class EmailService:
    """Sends booking and sign-in emails over SMTP.

    Every send returns a bool. Delivery problems are logged, never raised, so
    the caller's state change stands on its own.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def is_configured(self) -> bool:
        return self.settings.email_configured

    async def send_confirmation_email(self, to_address: str, booking: BookingRead) -> bool:
        rows = booking_details(booking)
        intro = (
            f"Your booking request for the {booking.venue_type.label} has been confirmed. "
            "Please find the details below."
        )
        return await self._send(
            to_address,
            subject=f"Booking Confirmed - {booking.venue_type.label}",
            heading="Booking Confirmation",
            paragraphs=[intro],
            rows=rows,
        )

    async def send_admin_notification(self, booking: BookingRead, recipients: Sequence[str]) -> Dict[str, bool]:
        rows = booking_details(booking)
        if booking.client_email:
            rows.append(("Requested By", booking.client_email))
        intro = (
            f"A new {booking.venue_type.label} booking request is waiting for review. "
            "Please sign in to the admin dashboard to accept or reject it."
        )
        results: Dict[str, bool] = {}
        for address in recipients:
            results[address] = await self._send(
                address,
                subject=f"New Booking Request - {booking.venue_type.label}",
                heading="New Booking Request",
                paragraphs=[intro],
                rows=rows,
            )
        return results

    async def send_verification_code_email(self, to_address: str, code: str) -> bool:
        return await self._send(
            to_address,
            subject="Your Verification Code - Booking System",
            heading="Verification Code",
            paragraphs=[
                "Your verification code for signing in to the booking system is:",
                code,
                f"This code will expire in {self.settings.verification_code_ttl_minutes} minutes.",
                "If you did not request this code, please ignore this email.",
            ],
        )

    def build_message(
        self,
        to_address: str,
        subject: str,
        heading: str,
        paragraphs: Sequence[str],
        rows: Sequence[Tuple[str, str]] = (),
    ) -> EmailMessage:
        sender = self.settings.email_from_name
        footer = f"{sender}\nThis is an automated email. Please do not reply."

        text_lines = [f"{heading} - {sender}", "", *paragraphs, ""]
        text_lines.extend(f"{label}: {value}" for label, value in rows)
        text_lines.extend(["", "---", footer])

        html_rows = "".join(
            f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(value)}</td></tr>" for label, value in rows
        )
        html_paragraphs = "".join(f"<p>{escape(paragraph)}</p>" for paragraph in paragraphs)
        html = (
            "<!DOCTYPE html><html><body style=\"font-family: Arial, sans-serif; color: #333;\">"
            f"<h1>{escape(heading)}</h1><p>{escape(sender)}</p>"
            f"{html_paragraphs}"
            f"{'<table>' + html_rows + '</table>' if rows else ''}"
            f"<p style=\"color: #666; font-size: 12px;\">{escape(footer).replace(chr(10), '<br>')}</p>"
            "</body></html>"
        )

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = f"\"{sender}\" <{self.settings.email_user}>"
        message["To"] = to_address
        message.set_content("\n".join(text_lines))
        message.add_alternative(html, subtype="html")
        return message

    async def _send(
        self,
        to_address: str,
        subject: str,
        heading: str,
        paragraphs: Sequence[str],
        rows: Sequence[Tuple[str, str]] = (),
    ) -> bool:
        if not self.is_configured():
            logger.warning("Email configuration not set up", extra={"to": to_address, "subject": subject})
            return False

        try:
            # Header values containing CR or LF raise ValueError here.
            message = self.build_message(to_address, subject, heading, paragraphs, rows)
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError, ValueError) as error:
            logger.exception(
                "Failed to send email",
                extra={"to": to_address, "subject": subject, "error": str(error)},
            )
            return False

        logger.info("Email sent", extra={"to": to_address, "subject": subject})
        return True

    def _deliver(self, message: EmailMessage) -> None:
        host, port = self.settings.smtp_host, self.settings.smtp_port
        context = ssl.create_default_context()
        if port == 465:
            with smtplib.SMTP_SSL(host, port, context=context) as server:
                server.login(self.settings.email_user, self.settings.email_password)
                server.send_message(message)
        else:
            with smtplib.SMTP(host, port) as server:
                server.starttls(context=context)
                server.login(self.settings.email_user, self.settings.email_password)
                server.send_message(message)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    global _email_service
    if not _email_service:
        _email_service = EmailService()
    return _email_service
