"""
Booking emails: expiry warnings and expiry notices for planners and owners.

Delivery goes over SMTP when SMTP_USER / SMTP_PASSWORD are set. Without
credentials the email is only written to the email log as queued.
"""
import re
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.core import config
from app.core.logging_config import get_logger

logger = get_logger("email")


def send_email(to_email: str | None, subject: str, html: str) -> bool:
    """Send one email. Returns True if sent or queued, False if skipped or failed."""
    to_email = (to_email or "").strip()
    if not to_email:
        return False

    user = (config.SMTP_USER or "").strip()
    password = (config.SMTP_PASSWORD or "").strip()
    if not user or not password:
        preview = re.sub(r"<[^>]*>", " ", html)
        preview = re.sub(r"\s+", " ", preview).strip()[:200]
        logger.info(f"[EMAIL QUEUED] To: {to_email} | Subject: {subject}")
        logger.info(f"[EMAIL BODY] {preview}...")
        return True

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = config.EMAIL_FROM
    msg["To"] = to_email
    msg.attach(MIMEText(html, "html"))

    try:
        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=10) as server:
            server.starttls()
            server.login(user, password)
            server.sendmail(user, [to_email], msg.as_string())
        logger.info(f"Email sent to {to_email}: {subject}")
        return True
    except Exception as e:
        logger.exception(f"Failed to send email to {to_email}: {e}")
        return False


def _wrap(heading: str, paragraphs: list[str], cta: tuple[str, str] | None = None) -> str:
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    button = ""
    if cta:
        label, path = cta
        button = (
            f'<p style="margin: 24px 0;"><a href="{config.APP_URL}{path}" '
            f'style="padding: 12px 24px; text-decoration: none;">{label}</a></p>'
        )
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f"<h2>{heading}</h2>{body}{button}"
        '<p style="color: #888; font-size: 12px;">This is an automated message.</p>'
        "</div>"
    )


# =====================================================================
# EXPIRY WARNING (before the deadline)
# =====================================================================
def build_expiry_warning_planner_email(
    planner_name, venue_name, hall_name, booking_date, expiry_time
):
    return {
        "subject": f"Action Required: Your booking at {venue_name} expires soon",
        "html": _wrap(
            "Booking Expiry Warning",
            [
                f"Dear {planner_name},",
                f"Your booking at <strong>{venue_name} - {hall_name}</strong> for "
                f"<strong>{booking_date}</strong> has been accepted but payment has not been received.",
                f"This booking will <strong>automatically expire at {expiry_time}</strong> "
                "if payment is not completed.",
                "Please log in to complete your payment to secure your booking.",
            ],
            cta=("Complete Payment", "/bookings"),
        ),
    }


def build_expiry_warning_owner_email(
    owner_name, planner_name, venue_name, hall_name, booking_date, expiry_time
):
    return {
        "subject": f"Booking at {venue_name} awaiting payment",
        "html": _wrap(
            "Booking Payment Pending",
            [
                f"Dear {owner_name},",
                f"The booking by <strong>{planner_name}</strong> for <strong>{venue_name} - {hall_name}</strong> "
                f"on <strong>{booking_date}</strong> is still awaiting payment.",
                f"If payment is not received by <strong>{expiry_time}</strong>, "
                "the booking will be cancelled automatically and the date released.",
            ],
            cta=("View Bookings", "/owner/bookings"),
        ),
    }


# =====================================================================
# EXPIRED (after the deadline)
# =====================================================================
def build_expired_planner_email(planner_name, venue_name, hall_name, booking_date):
    return {
        "subject": f"Your booking at {venue_name} has expired",
        "html": _wrap(
            "Booking Expired",
            [
                f"Dear {planner_name},",
                f"Your booking at <strong>{venue_name} - {hall_name}</strong> for "
                f"<strong>{booking_date}</strong> has expired because payment was not received "
                "within 24 hours of approval.",
                "The date may still be available. You are welcome to submit a new booking request.",
            ],
            cta=("Browse Venues", "/search"),
        ),
    }


def build_expired_owner_email(owner_name, planner_name, venue_name, hall_name, booking_date):
    return {
        "subject": f"Booking expired at {venue_name}",
        "html": _wrap(
            "Booking Expired",
            [
                f"Dear {owner_name},",
                f"The booking by <strong>{planner_name}</strong> for <strong>{venue_name} - {hall_name}</strong> "
                f"on <strong>{booking_date}</strong> has been cancelled automatically "
                "because payment was not received before the deadline.",
                "The date is now available for other bookings.",
            ],
            cta=("View Bookings", "/owner/bookings"),
        ),
    }
