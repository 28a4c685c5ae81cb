"""
Payment-deadline enforcement for accepted bookings.

An accepted booking has PAYMENT_WINDOW_HOURS to receive its deposit. Inside the
last EXPIRY_WARNING_HOURS both parties get one warning email; once the deadline
passes the booking is cancelled and both parties are told. All state lives on
the booking row (accepted_at, expiry_notification_sent), so a check can run any
number of times, from any process.
"""
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.core.config import EXPIRY_WARNING_HOURS
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.enums import BookingStatus, NotificationType
from app.services import email, notifications
from app.services.booking_store import (
    claim_expiry_warning,
    get_accepted_unpaid_bookings,
    update_booking_status_with_data,
)
from app.utils.dates import format_deadline, format_event_date, to_naive_utc, utcnow

logger = get_logger("expiry")

EXPIRY_CANCELLATION_REASON = "Automatically expired: payment not received before deadline"


def _parties(booking: Booking):
    planner = booking.planner
    owner = booking.venue.owner if booking.venue else None
    return planner, owner


def _context(booking: Booking):
    return {
        "venue_name": booking.venue.title if booking.venue else "the venue",
        "hall_name": booking.hall.name if booking.hall else "the hall",
        "booking_date": format_event_date(booking.start_date),
    }


def in_warning_window(booking: Booking, now: datetime) -> bool:
    deadline = booking.expiry_deadline
    if deadline is None:
        return False
    remaining = deadline - now
    return timedelta(0) < remaining <= timedelta(hours=EXPIRY_WARNING_HOURS)


def is_expired(booking: Booking, now: datetime) -> bool:
    deadline = booking.expiry_deadline
    return deadline is not None and now >= deadline


# =====================================================================
# PASS 1: WARNINGS
# =====================================================================
def _warn(db: Session, booking: Booking) -> bool:
    # Claim first: of two overlapping checks only one gets past this
    if not claim_expiry_warning(db, booking):
        logger.info(f"Expiry warning for booking {booking.id} already claimed; skipped")
        return False

    planner, owner = _parties(booking)
    ctx = _context(booking)
    expiry_time = format_deadline(booking.expiry_deadline)

    if planner:
        message = email.build_expiry_warning_planner_email(
            planner.name, ctx["venue_name"], ctx["hall_name"], ctx["booking_date"], expiry_time
        )
        email.send_email(planner.email, message["subject"], message["html"])
    if owner:
        message = email.build_expiry_warning_owner_email(
            owner.name,
            planner.name if planner else "A planner",
            ctx["venue_name"],
            ctx["hall_name"],
            ctx["booking_date"],
            expiry_time,
        )
        email.send_email(owner.email, message["subject"], message["html"])

    notifications.create_notification(
        db,
        user_id=booking.planner_user_id,
        type=NotificationType.BOOKING_EXPIRY,
        title="Payment Due Soon",
        body=(
            f"Your booking for {ctx['hall_name']} at {ctx['venue_name']} on {ctx['booking_date']} "
            f"expires at {expiry_time} unless payment is completed."
        ),
        link_url="/bookings",
    )

    logger.info(f"Expiry warning sent for booking {booking.id} (expires at {expiry_time})")
    return True


def send_expiry_warnings(db: Session, now: datetime | None = None) -> int:
    """Warn once per booking inside the final window before its deadline. Returns the count warned."""
    now = to_naive_utc(now) if now else utcnow()
    warned = 0

    try:
        bookings = get_accepted_unpaid_bookings(db)
    except Exception:
        db.rollback()
        logger.exception("Error loading bookings for expiry warnings")
        return 0

    for booking in bookings:
        if booking.accepted_at is None or booking.expiry_notification_sent:
            continue
        if not in_warning_window(booking, now):
            continue

        try:
            if _warn(db, booking):
                warned += 1
        except Exception:
            db.rollback()
            logger.exception(f"Error sending expiry warning for booking {booking.id}")

    return warned


# =====================================================================
# PASS 2: EXPIRY
# =====================================================================
def _expire(db: Session, booking: Booking) -> bool:
    updated = update_booking_status_with_data(
        db,
        booking,
        BookingStatus.CANCELLED,
        expected_status=BookingStatus.ACCEPTED,
        cancellation_reason=EXPIRY_CANCELLATION_REASON,
    )
    if updated is None:
        # Paid or cancelled by someone else since the query ran
        logger.info(f"Booking {booking.id} left accepted before expiry; skipped")
        return False

    planner, owner = _parties(booking)
    ctx = _context(booking)

    if planner:
        message = email.build_expired_planner_email(
            planner.name, ctx["venue_name"], ctx["hall_name"], ctx["booking_date"]
        )
        email.send_email(planner.email, message["subject"], message["html"])
    if owner:
        message = email.build_expired_owner_email(
            owner.name,
            planner.name if planner else "A planner",
            ctx["venue_name"],
            ctx["hall_name"],
            ctx["booking_date"],
        )
        email.send_email(owner.email, message["subject"], message["html"])

    logger.info(
        f"Booking {booking.id} expired - payment not received by {format_deadline(booking.expiry_deadline)}"
    )
    return True


def expire_unpaid_bookings(db: Session, now: datetime | None = None) -> int:
    """Cancel accepted bookings whose payment deadline has passed. Returns the count expired."""
    now = to_naive_utc(now) if now else utcnow()
    expired = 0

    try:
        bookings = get_accepted_unpaid_bookings(db)
    except Exception:
        db.rollback()
        logger.exception("Error loading bookings for expiry")
        return 0

    for booking in bookings:
        if not is_expired(booking, now):
            continue

        try:
            if _expire(db, booking):
                expired += 1
        except Exception:
            db.rollback()
            logger.exception(f"Error expiring booking {booking.id}")

    return expired


# =====================================================================
# ENTRY POINT
# =====================================================================
def run_booking_expiry_check(db: Session, now: datetime | None = None) -> dict:
    now = to_naive_utc(now) if now else utcnow()

    logger.info("Running booking expiry check...")
    warned = send_expiry_warnings(db, now)
    expired = expire_unpaid_bookings(db, now)
    logger.info(f"Booking expiry check complete | warned={warned} | expired={expired}")

    return {"warned": warned, "expired": expired}
