"""
Outgoing email.

Everything here is best-effort: handlers schedule these functions through
FastAPI ``BackgroundTasks`` so they run after the response is sent, and a
failure is logged, never raised. With ``SMTP_HOST`` unset the message is only
logged.
"""

import html
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from urbanstay.core.config import get_settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, body_html: str, body_text: Optional[str] = None) -> bool:
    settings = get_settings()
    if not settings.SMTP_HOST:
        logger.info("Email disabled, skipping %r to %s", subject, to)
        return False

    msg = EmailMessage()
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body_text or subject)
    msg.add_alternative(body_html, subtype="html")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            smtp.starttls()
            if settings.SMTP_USER:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send %r to %s", subject, to)
        return False

    logger.info("Email %r sent to %s", subject, to)
    return True


def send_welcome_email(email: str, name: str, role: str) -> bool:
    settings = get_settings()
    body = (
        f"<h2>Welcome to UrbanStay</h2>"
        f"<p>Hello <strong>{html.escape(name)}</strong>,</p>"
        f"<p>Your account as a <strong>{html.escape(role)}</strong> is now ready.</p>"
        f"<p><a href=\"{settings.FRONTEND_URL}\">Start exploring</a></p>"
    )
    return send_email(email, "Welcome to UrbanStay!", body, f"Welcome to UrbanStay, {name}!")


def send_booking_request_email(
    seller_email: str,
    property_title: str,
    buyer_name: str,
    booking_type: str,
    visit_date: str,
    visit_time: str,
) -> bool:
    body = (
        f"<h2>New {html.escape(booking_type)} request</h2>"
        f"<p><strong>{html.escape(buyer_name)}</strong> requested a {html.escape(booking_type)} "
        f"for <strong>{html.escape(property_title)}</strong> on {html.escape(visit_date)} "
        f"({html.escape(visit_time)}).</p>"
        f"<p>Confirm or cancel it from your dashboard.</p>"
    )
    return send_email(seller_email, f"New booking request for {property_title}", body)


def send_inquiry_email(
    owner_email: str,
    property_title: str,
    inquiry_type: str,
    sender_name: str,
    sender_email: str,
    phone: Optional[str],
    message: str,
    preferred_visit_date: Optional[str] = None,
    preferred_visit_time: Optional[str] = None,
) -> bool:
    kind = inquiry_type.replace("-", " ")
    visit = ""
    if preferred_visit_date:
        visit = f"<p><strong>Preferred visit:</strong> {html.escape(preferred_visit_date)}"
        if preferred_visit_time:
            visit += f" {html.escape(preferred_visit_time)}"
        visit += "</p>"
    body = (
        f"<h2>New property inquiry</h2>"
        f"<p>You have a new <strong>{html.escape(kind)}</strong> inquiry for "
        f"<strong>{html.escape(property_title)}</strong>.</p>"
        f"<p><strong>Name:</strong> {html.escape(sender_name)}<br>"
        f"<strong>Email:</strong> {html.escape(sender_email)}<br>"
        f"<strong>Phone:</strong> {html.escape(phone or '-')}</p>"
        f"<p>{html.escape(message)}</p>"
        f"{visit}"
    )
    return send_email(owner_email, f"New {kind} inquiry for {property_title}", body)


def send_password_reset_otp_email(email: str, otp: str, minutes: int) -> bool:
    body = (
        f"<h2>Password reset code</h2>"
        f"<p>Your code to reset your UrbanStay password is:</p>"
        f"<p style=\"font-size: 24px; font-weight: bold; letter-spacing: 2px;\">{otp}</p>"
        f"<p>It is valid for {minutes} minutes. If you did not ask for it, ignore this email.</p>"
    )
    text = f"Your UrbanStay password reset code is {otp}. It is valid for {minutes} minutes."
    return send_email(email, "Your UrbanStay password reset code", body, text)
