"""
Row-level reads and writes on bookings shared by the lifecycle, the conflict
resolver and the expiry job.
"""
from sqlalchemy.orm import Session

from app.models.booking import Booking
from app.models.enums import BookingStatus


def get_booking(db: Session, booking_id: int) -> Booking | None:
    return db.query(Booking).filter(Booking.id == booking_id).first()


def update_booking_status_with_data(
    db: Session,
    booking: Booking,
    status: BookingStatus,
    expected_status: BookingStatus | None = None,
    **data,
) -> Booking | None:
    """
    Write status plus any accompanying fields (cancellation_reason, accepted_at,
    payment flags) as a single UPDATE and commit it.

    The UPDATE only matches while the row still holds `expected_status`
    (defaults to the status the caller read). Returns the refreshed booking, or
    None when another writer moved the booking first.
    """
    expected = expected_status or booking.status

    values = {Booking.status: status}
    for field, value in data.items():
        values[getattr(Booking, field)] = value

    updated = (
        db.query(Booking)
        .filter(Booking.id == booking.id, Booking.status == expected)
        .update(values, synchronize_session=False)
    )
    db.commit()
    db.refresh(booking)

    return booking if updated else None


def mark_expiry_notification_sent(db: Session, booking: Booking) -> Booking:
    db.query(Booking).filter(Booking.id == booking.id).update(
        {Booking.expiry_notification_sent: True}, synchronize_session=False
    )
    db.commit()
    db.refresh(booking)
    return booking


def claim_expiry_warning(db: Session, booking: Booking) -> bool:
    """
    Set the warning flag only if no one else has, while the booking is still
    accepted. Returns True for the single caller that flipped it; that caller
    alone sends the warning.
    """
    claimed = (
        db.query(Booking)
        .filter(
            Booking.id == booking.id,
            Booking.status == BookingStatus.ACCEPTED,
            Booking.expiry_notification_sent == False,  # noqa: E712
        )
        .update({Booking.expiry_notification_sent: True}, synchronize_session=False)
    )
    db.commit()
    db.refresh(booking)
    return claimed == 1


def get_accepted_unpaid_bookings(db: Session) -> list[Booking]:
    return (
        db.query(Booking)
        .filter(
            Booking.status == BookingStatus.ACCEPTED,
            Booking.deposit_paid == False,  # noqa: E712
        )
        .order_by(Booking.accepted_at)
        .all()
    )
