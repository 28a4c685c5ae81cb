from datetime import date

from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.enums import BookingStatus, NotificationType
from app.services import notifications
from app.services.booking_store import update_booking_status_with_data
from app.utils.dates import format_event_date

logger = get_logger("booking")

CONFLICT_CANCELLATION_REASON = "Another booking for this date has been accepted by the venue owner."


def ranges_overlap(s1: date, e1: date | None, s2: date, e2: date | None) -> bool:
    """Inclusive day-range intersection; a missing end means a single day."""
    e1 = e1 or s1
    e2 = e2 or s2
    return s1 <= e2 and s2 <= e1


def find_conflicting(
    db: Session,
    hall_id: int,
    start_date: date,
    end_date: date | None,
    exclude_booking_id: int,
) -> list[Booking]:
    """Other still-requested bookings on the hall whose day range overlaps [start, end]."""
    end_date = end_date or start_date

    candidates = (
        db.query(Booking)
        .filter(
            Booking.hall_id == hall_id,
            Booking.status == BookingStatus.REQUESTED,
            Booking.id != exclude_booking_id,
            Booking.start_date <= end_date,
        )
        .order_by(Booking.id)
        .all()
    )

    return [
        b for b in candidates
        if ranges_overlap(b.start_date, b.effective_end_date, start_date, end_date)
    ]


# Bookings in these states have been taken by the owner and hold their dates
HOLDING_STATUSES = (
    BookingStatus.ACCEPTED,
    BookingStatus.PAID,
    BookingStatus.CONFIRMED,
    BookingStatus.CANCELLATION_REQUESTED,
)


def has_conflict(
    db: Session,
    hall_id: int,
    start_date: date,
    end_date: date | None,
    exclude_booking_id: int | None = None,
) -> bool:
    """True when an owner-accepted booking on the hall already covers part of [start, end]."""
    end_date = end_date or start_date

    query = db.query(Booking).filter(
        Booking.hall_id == hall_id,
        Booking.status.in_(HOLDING_STATUSES),
        Booking.start_date <= end_date,
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)

    return any(
        ranges_overlap(b.start_date, b.effective_end_date, start_date, end_date)
        for b in query.all()
    )


def _notify_declined(db: Session, accepted: Booking, declined: Booking, actor_user_id: int | None):
    hall_name = accepted.hall.name if accepted.hall else "the hall"
    venue_title = accepted.venue.title if accepted.venue else "our venue"
    cb_date = format_event_date(declined.start_date)

    notifications.create_notification(
        db,
        user_id=declined.planner_user_id,
        type=NotificationType.BOOKING_CANCELLED,
        title="Booking Declined",
        body=(
            f"Your booking request for {hall_name} at {venue_title} on {cb_date} has been declined "
            "because another booking for the same date was accepted."
        ),
        link_url="/bookings",
    )
    notifications.create_message(
        db,
        booking_id=declined.id,
        from_user_id=actor_user_id,
        to_user_id=declined.planner_user_id,
        body=(
            f"We're sorry, but your booking request for {hall_name} at {venue_title} on {cb_date} "
            "has been declined. Another booking for the same date has been accepted. "
            "Please feel free to choose a different date."
        ),
    )


def decline_conflicting(db: Session, accepted: Booking, actor_user_id: int | None) -> list[Booking]:
    """
    Cancel every pending request competing with a freshly accepted booking and
    tell each affected planner. Returns the bookings that were cancelled.

    All cancellations are committed before any planner is told, so a failed
    notice never leaves a competitor in `requested`.
    """
    conflicting = find_conflicting(
        db,
        accepted.hall_id,
        accepted.start_date,
        accepted.end_date,
        accepted.id,
    )

    declined = []
    for cb in conflicting:
        updated = update_booking_status_with_data(
            db,
            cb,
            BookingStatus.CANCELLED,
            expected_status=BookingStatus.REQUESTED,
            cancellation_reason=CONFLICT_CANCELLATION_REASON,
        )
        if updated is None:
            # Moved on since the query ran; nothing to decline
            continue

        declined.append(updated)
        logger.info(
            f"Booking Declined (conflict) | Booking={cb.id} | Accepted={accepted.id} | Hall={cb.hall_id}"
        )

    for cb in declined:
        try:
            _notify_declined(db, accepted, cb, actor_user_id)
        except Exception:
            db.rollback()
            logger.exception(f"Decline notice failed | Booking={cb.id} | Accepted={accepted.id}")

    return declined
